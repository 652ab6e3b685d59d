"""
Ledger adapter used to collect voting fees and disburse them.

Balances live in ``ledger_accounts``; every transfer is journaled in
``ledger_transfers`` within the caller's database transaction, so a failed
voting operation never leaves a half-applied transfer behind.
"""
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from votekeeper.core.exceptions import InsufficientBalance
from votekeeper.models.ledger import LedgerAccount, LedgerTransfer

logger = logging.getLogger(__name__)


class Ledger:
    """Value-transfer primitive over the ledger tables."""

    def __init__(self, db: AsyncSession, escrow_address: str):
        self.db = db
        self.escrow_address = escrow_address

    async def _get_account(self, address: str) -> Optional[LedgerAccount]:
        result = await self.db.execute(
            select(LedgerAccount).where(LedgerAccount.address == address)
        )
        return result.scalar_one_or_none()

    async def balance_of(self, address: str) -> int:
        account = await self._get_account(address)
        return account.balance if account else 0

    async def transfer(
        self,
        sender: str,
        recipient: str,
        amount: int,
        memo: Optional[str] = None
    ) -> LedgerTransfer:
        """
        Move ``amount`` from sender to recipient.

        Raises InsufficientBalance before touching any row when the sender
        cannot cover the amount.
        """
        if amount <= 0:
            raise InsufficientBalance(f"Transfer amount must be positive, got {amount}")

        source = await self._get_account(sender)
        if source is None or source.balance < amount:
            available = source.balance if source else 0
            raise InsufficientBalance(
                f"{sender} holds {available}, needs {amount}"
            )

        target = await self._get_account(recipient)
        if target is None:
            target = LedgerAccount(address=recipient, balance=0)
            self.db.add(target)

        source.balance -= amount
        target.balance += amount

        entry = LedgerTransfer(sender=sender, recipient=recipient, amount=amount, memo=memo)
        self.db.add(entry)
        await self.db.flush()

        logger.info(f"Ledger transfer: {sender} -> {recipient} amount={amount} memo={memo}")
        return entry
