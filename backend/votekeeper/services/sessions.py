"""
Session manager: owns the session lifecycle and the session history.

    start_session -> configure / add_option -> end_session -> finalize

Exactly one session is current. Past sessions stay readable by id.
"""
import logging
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from votekeeper.core.exceptions import (
    SessionActive,
    SessionNotActive,
    NotFound,
    InvalidConfig,
)
from votekeeper.models.core_state import CoreState, CORE_STATE_ID
from votekeeper.models.session import VotingSession, VotingFormat
from votekeeper.services.options import OptionRegistry, MAX_OPTIONS

logger = logging.getLogger(__name__)

MIN_START_OPTIONS = 2
MAX_START_OPTIONS = 5
MAX_ROUNDS = 10
MAX_WIN_THRESHOLD = 100


def blank_core_state(administrator: str) -> CoreState:
    return CoreState(
        id=CORE_STATE_ID,
        administrator=administrator,
        current_session_id=None,
        session_count=0,
        total_participation=0,
        fee_balance=0,
    )


async def ensure_core_state(db: AsyncSession, administrator: str) -> CoreState:
    """Create the core state row for ``administrator`` unless it exists."""
    state = await db.get(CoreState, CORE_STATE_ID)
    if state is None:
        state = blank_core_state(administrator)
        db.add(state)
        await db.flush()
        logger.info(f"Core state initialized: administrator={administrator}")
    return state


class SessionManager:
    """Creates, configures and closes sessions."""

    def __init__(self, db: AsyncSession, options: OptionRegistry):
        self.db = db
        self.options = options

    async def get_state(self, administrator: str) -> CoreState:
        """Lock the core state row for the rest of the transaction.

        Every mutating operation starts here, so writers run one at a time.
        """
        result = await self.db.execute(
            select(CoreState)
            .where(CoreState.id == CORE_STATE_ID)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        state = result.scalar_one_or_none()
        if state is None:
            state = await ensure_core_state(self.db, administrator)
        return state

    async def peek_state(self, administrator: str) -> CoreState:
        """Core state for queries; an unsaved default before the first write."""
        state = await self.db.get(CoreState, CORE_STATE_ID)
        return state if state is not None else blank_core_state(administrator)

    async def get_session(self, session_id: int) -> VotingSession:
        session = await self.db.get(VotingSession, session_id)
        if session is None:
            raise NotFound(f"Session {session_id} not found")
        return session

    async def current_session(self, state: CoreState) -> VotingSession:
        if state.current_session_id is None:
            raise NotFound("No session has been started")
        return await self.get_session(state.current_session_id)

    async def list_sessions(self) -> list[VotingSession]:
        result = await self.db.execute(select(VotingSession).order_by(VotingSession.id))
        return list(result.scalars().all())

    @staticmethod
    def require_open(session: VotingSession) -> VotingSession:
        if session.finalized or not session.active:
            raise SessionNotActive(f"Session {session.id} is not open")
        return session

    async def start(
        self,
        state: CoreState,
        creator: str,
        question: str,
        duration: int,
        option_texts: Sequence[str],
        height: int,
    ) -> VotingSession:
        if state.current_session_id is not None:
            previous = await self.get_session(state.current_session_id)
            if previous.active:
                raise SessionActive(f"Session {previous.id} is still open")

        if not MIN_START_OPTIONS <= len(option_texts) <= MAX_START_OPTIONS:
            raise InvalidConfig(
                f"A session starts with {MIN_START_OPTIONS} to {MAX_START_OPTIONS} options"
            )
        if duration <= 0:
            raise InvalidConfig("Duration must be positive")
        for text in option_texts:
            self.options.check_text(text)

        session = VotingSession(
            id=state.session_count + 1,
            question=question,
            start_height=height,
            end_height=height + duration,
            active=True,
            finalized=False,
            voting_format=VotingFormat.SIMPLE,
            quorum_threshold=0,
            win_threshold=50,
            max_rounds=1,
            current_round=1,
            fee_amount=0,
            fees_collected=0,
            allow_delegation=False,
            allow_vote_changing=False,
            require_minimum_balance=False,
            minimum_balance=0,
            total_votes=0,
            total_weight=0,
            created_by=creator,
        )
        self.db.add(session)
        await self.db.flush()

        await self.options.register(session.id, option_texts)

        state.session_count += 1
        state.current_session_id = session.id
        await self.db.flush()

        logger.info(
            f"Session started: session={session.id} options={len(option_texts)} "
            f"window={session.start_height}..{session.end_height}"
        )
        return session

    async def configure(
        self,
        session: VotingSession,
        voting_format: VotingFormat,
        quorum_threshold: int,
        win_threshold: int,
        max_rounds: int,
        allow_delegation: bool,
        allow_vote_changing: bool,
        require_minimum_balance: bool,
        minimum_balance: int,
        fee_amount: int,
    ) -> VotingSession:
        self.require_open(session)

        if not 0 <= win_threshold <= MAX_WIN_THRESHOLD:
            raise InvalidConfig(f"Win threshold must be between 0 and {MAX_WIN_THRESHOLD}")
        if not 1 <= max_rounds <= MAX_ROUNDS:
            raise InvalidConfig(f"Max rounds must be between 1 and {MAX_ROUNDS}")
        if max_rounds < session.current_round:
            raise InvalidConfig(
                f"Session is already in round {session.current_round}"
            )
        if quorum_threshold < 0 or minimum_balance < 0 or fee_amount < 0:
            raise InvalidConfig("Amounts cannot be negative")

        session.voting_format = voting_format
        session.quorum_threshold = quorum_threshold
        session.win_threshold = win_threshold
        session.max_rounds = max_rounds
        session.allow_delegation = allow_delegation
        session.allow_vote_changing = allow_vote_changing
        session.require_minimum_balance = require_minimum_balance
        session.minimum_balance = minimum_balance
        session.fee_amount = fee_amount
        await self.db.flush()

        logger.info(
            f"Session configured: session={session.id} format={voting_format.value} "
            f"quorum={quorum_threshold} rounds={max_rounds} fee={fee_amount}"
        )
        return session

    async def add_option(self, session: VotingSession, text: str):
        self.require_open(session)
        option = await self.options.add(session.id, text)
        logger.info(f"Option added: session={session.id} option={option.option_id}/{MAX_OPTIONS}")
        return option

    async def end(self, session: VotingSession) -> VotingSession:
        self.require_open(session)
        session.active = False
        await self.db.flush()
        logger.info(f"Session ended: session={session.id} votes={session.total_votes}")
        return session

    async def find_session(self, session_id: Optional[int], state: CoreState) -> VotingSession:
        """Session by id, or the current one when no id is given."""
        if session_id is None:
            return await self.current_session(state)
        return await self.get_session(session_id)
