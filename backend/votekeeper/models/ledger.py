"""
Ledger models backing the default value-transfer adapter.
"""
from typing import Optional
from sqlalchemy import String, BigInteger
from sqlalchemy.orm import Mapped, mapped_column
from votekeeper.models.base import BaseModel


class LedgerAccount(BaseModel):
    """Balance held by an address."""
    __tablename__ = "ledger_accounts"

    address: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    balance: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<LedgerAccount {self.address} {self.balance}>"


class LedgerTransfer(BaseModel):
    """Journal line for a completed transfer."""
    __tablename__ = "ledger_transfers"

    sender: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    recipient: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    memo: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
