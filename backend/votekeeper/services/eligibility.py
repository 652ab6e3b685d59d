"""
Voter eligibility.

Voting is open by default: a voter with no authorization record is allowed.
The administrator can flip any address's record with authorize/revoke.
"""
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from votekeeper.models.session import VotingSession
from votekeeper.models.voter import VoterAuthorization
from votekeeper.services.ledger import Ledger

logger = logging.getLogger(__name__)


class VoterEligibility:
    """Balance and authorization rules for casting and receiving votes."""

    def __init__(self, db: AsyncSession, ledger: Ledger):
        self.db = db
        self.ledger = ledger

    async def get_authorization(self, voter: str) -> Optional[VoterAuthorization]:
        result = await self.db.execute(
            select(VoterAuthorization).where(VoterAuthorization.voter == voter)
        )
        return result.scalar_one_or_none()

    async def set_authorization(self, voter: str, authorized: bool) -> VoterAuthorization:
        record = await self.get_authorization(voter)
        if record is None:
            record = VoterAuthorization(voter=voter, authorized=authorized)
            self.db.add(record)
        else:
            record.authorized = authorized
        await self.db.flush()

        logger.info(f"Voter authorization set: voter={voter} authorized={authorized}")
        return record

    async def has_required_balance(self, session: VotingSession, voter: str) -> bool:
        if not session.require_minimum_balance:
            return True
        return await self.ledger.balance_of(voter) >= session.minimum_balance

    async def is_eligible(self, session: Optional[VotingSession], voter: str) -> bool:
        """
        True when the balance rule (if the session enables it) holds and the
        voter has no authorization record or a ``True`` one.
        """
        if session is not None and not await self.has_required_balance(session, voter):
            return False

        record = await self.get_authorization(voter)
        if record is None:
            return True
        return record.authorized
