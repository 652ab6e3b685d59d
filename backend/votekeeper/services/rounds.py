"""
Round controller.

A session with max_rounds > 1 may move to a new round only while quorum is
unmet. Each advance snapshots the closing round and resets the round totals.
"""
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from votekeeper.core.exceptions import InvalidConfig
from votekeeper.models.round_result import RoundResult
from votekeeper.models.session import VotingSession
from votekeeper.services.options import OptionRegistry, leading_option

logger = logging.getLogger(__name__)


class RoundController:
    """Advances multi-round sessions."""

    def __init__(self, db: AsyncSession, options: OptionRegistry):
        self.db = db
        self.options = options

    async def list_results(self, session_id: int) -> list[RoundResult]:
        result = await self.db.execute(
            select(RoundResult)
            .where(RoundResult.session_id == session_id)
            .order_by(RoundResult.round)
        )
        return list(result.scalars().all())

    async def advance(self, session: VotingSession, height: int) -> RoundResult:
        if session.current_round >= session.max_rounds:
            raise InvalidConfig(
                f"Session {session.id} is already in its last round ({session.max_rounds})"
            )
        if session.total_votes >= session.quorum_threshold:
            raise InvalidConfig("Quorum is met; the round cannot be advanced")

        options = await self.options.list_options(session.id)
        leader = leading_option(options)

        snapshot = RoundResult(
            session_id=session.id,
            round=session.current_round,
            leading_option_id=leader.option_id if leader else None,
            total_votes=session.total_votes,
            total_weight=session.total_weight,
            quorum_met=False,
            closed_height=height,
        )
        self.db.add(snapshot)

        session.current_round += 1
        session.total_votes = 0
        session.total_weight = 0
        await self.options.reset_tallies(session.id)

        logger.info(
            f"Round advanced: session={session.id} closed={snapshot.round} "
            f"leader={snapshot.leading_option_id} votes={snapshot.total_votes}"
        )
        return snapshot
