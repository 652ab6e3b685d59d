"""
Tally engine: applies a cast vote to option and session totals.
"""
import logging
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from votekeeper.core.exceptions import (
    VotingEnded,
    Unauthorized,
    InvalidOption,
    AlreadyVoted,
    CapacityExceeded,
)
from votekeeper.models.core_state import CoreState
from votekeeper.models.session import VotingSession, VotingFormat
from votekeeper.models.voter import VoterRecord, VoterStats
from votekeeper.services.delegation import DelegationGraph
from votekeeper.services.eligibility import VoterEligibility
from votekeeper.services.ledger import Ledger
from votekeeper.services.options import OptionRegistry

logger = logging.getLogger(__name__)

MAX_RANKING = 10


class TallyEngine:
    """Records votes and keeps option totals consistent with session totals."""

    def __init__(
        self,
        db: AsyncSession,
        options: OptionRegistry,
        eligibility: VoterEligibility,
        delegation: DelegationGraph,
        ledger: Ledger,
    ):
        self.db = db
        self.options = options
        self.eligibility = eligibility
        self.delegation = delegation
        self.ledger = ledger

    async def get_record(self, session_id: int, voter: str, round_number: int) -> Optional[VoterRecord]:
        result = await self.db.execute(
            select(VoterRecord).where(
                VoterRecord.session_id == session_id,
                VoterRecord.voter == voter,
                VoterRecord.round == round_number
            )
        )
        return result.scalar_one_or_none()

    async def list_records(self, voter: str) -> list[VoterRecord]:
        result = await self.db.execute(
            select(VoterRecord)
            .where(VoterRecord.voter == voter)
            .order_by(VoterRecord.session_id, VoterRecord.round)
        )
        return list(result.scalars().all())

    async def get_stats(self, voter: str) -> Optional[VoterStats]:
        result = await self.db.execute(
            select(VoterStats).where(VoterStats.voter == voter)
        )
        return result.scalar_one_or_none()

    async def cast(
        self,
        state: CoreState,
        session: VotingSession,
        voter: str,
        option_id: int,
        ranking: Optional[Sequence[int]],
        height: int,
    ) -> VoterRecord:
        """
        Cast ``voter``'s ballot for ``option_id`` in the current round.

        With vote changing enabled the voter's record is overwritten and the
        new weight is added on top of the existing totals; the previous
        contribution stays counted.
        """
        if not session.active or session.finalized or height >= session.end_height:
            raise VotingEnded()

        if not await self.eligibility.is_eligible(session, voter):
            raise Unauthorized(f"{voter} is not eligible to vote")

        option = await self.options.get(session.id, option_id)
        if option is None or not option.active:
            raise InvalidOption(f"Option {option_id} is not on the ballot")

        record = await self.get_record(session.id, voter, session.current_round)
        if record is not None and not session.allow_vote_changing:
            raise AlreadyVoted()

        ranked = session.voting_format == VotingFormat.RANKED
        if ranked and ranking is not None and len(ranking) > MAX_RANKING:
            raise CapacityExceeded(f"A ranking holds at most {MAX_RANKING} entries")

        weight = await self.delegation.effective_weight(session, voter)

        # The fee is the last step that can fail; nothing is written before it
        if session.fee_amount > 0:
            await self.ledger.transfer(
                voter,
                self.ledger.escrow_address,
                session.fee_amount,
                memo=f"vote fee session={session.id}",
            )
            session.fees_collected += session.fee_amount
            state.fee_balance += session.fee_amount

        stored_ranking = list(ranking) if ranked and ranking is not None else None

        if record is None:
            record = VoterRecord(
                session_id=session.id,
                voter=voter,
                round=session.current_round,
                option_id=option_id,
                weight=weight,
                height=height,
                ranking=stored_ranking,
            )
            self.db.add(record)
        else:
            record.option_id = option_id
            record.weight = weight
            record.height = height
            record.ranking = stored_ranking

        option.votes += 1
        option.weight += weight
        session.total_votes += 1
        session.total_weight += weight

        stats = await self.get_stats(voter)
        if stats is None:
            stats = VoterStats(voter=voter, votes_cast=0)
            self.db.add(stats)
        stats.votes_cast += 1
        stats.last_session_id = session.id
        stats.last_height = height
        state.total_participation += 1

        await self.db.flush()

        logger.info(
            f"Vote cast: session={session.id} round={session.current_round} "
            f"voter={voter} option={option_id} weight={weight}"
        )
        return record
