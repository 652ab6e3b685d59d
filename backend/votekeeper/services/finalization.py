"""
Finalization gate: the one-shot transition that freezes a session's results.
"""
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from votekeeper.core.exceptions import AlreadyFinalized, SessionActive, QuorumNotMet
from votekeeper.models.option import BallotOption
from votekeeper.models.session import VotingSession
from votekeeper.services.options import OptionRegistry, leading_option

logger = logging.getLogger(__name__)


def meets_win_threshold(session: VotingSession, winner: Optional[BallotOption]) -> bool:
    """True when the winner holds at least ``win_threshold`` percent of the round's votes."""
    if winner is None or session.total_votes == 0:
        return False
    return winner.votes * 100 >= session.win_threshold * session.total_votes


class FinalizationGate:
    """Closes a session exactly once and records its winner."""

    def __init__(self, db: AsyncSession, options: OptionRegistry):
        self.db = db
        self.options = options

    async def current_leader(self, session: VotingSession) -> Optional[BallotOption]:
        """Leading option across every registered option, ties toward the lower id."""
        return leading_option(await self.options.list_options(session.id))

    async def finalize(self, session: VotingSession, height: int) -> tuple[list[BallotOption], Optional[BallotOption]]:
        if session.finalized:
            raise AlreadyFinalized()
        if session.active:
            raise SessionActive("End the session before finalizing it")
        if height < session.end_height:
            raise SessionActive(
                f"Voting window runs until height {session.end_height} (now {height})"
            )
        if session.total_votes < session.quorum_threshold:
            raise QuorumNotMet(
                f"{session.total_votes} votes cast, quorum is {session.quorum_threshold}"
            )

        options = await self.options.list_options(session.id)
        winner = leading_option(options)

        session.finalized = True
        session.winner_option_id = winner.option_id if winner else None
        session.finalized_height = height
        await self.db.flush()

        logger.info(
            f"Session finalized: session={session.id} winner={session.winner_option_id} "
            f"votes={session.total_votes}"
        )
        return options, winner
