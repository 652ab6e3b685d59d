"""
VotingCore - the aggregate every voting operation goes through.

Composes the option registry, eligibility rules, delegation graph, tally
engine, round controller, session manager and finalization gate over one
database session. Every operation:

- locks the core state row first when it writes,
- reads the height once,
- checks all of its preconditions before the first write,
- leaves committing or rolling back to the owner of the database session.
"""
import logging
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession

from votekeeper.core.exceptions import Unauthorized, NotFound, InvalidConfig, AlreadyFinalized
from votekeeper.models.core_state import CoreState
from votekeeper.models.delegation import Delegation
from votekeeper.models.option import BallotOption
from votekeeper.models.round_result import RoundResult
from votekeeper.models.session import VotingSession, VotingFormat
from votekeeper.models.voter import VoterRecord, VoterWeight, VoterAuthorization
from votekeeper.schemas.voting import (
    VoteReceipt,
    OptionResponse,
    VoterRecordResponse,
    VoterStatsResponse,
    VoterHistoryResponse,
    DelegationResponse,
    DelegationInfoResponse,
    RoundResultResponse,
    RoundInfoResponse,
    LeaderResponse,
    DetailedResultsResponse,
    FinalizeResponse,
    AnalyticsResponse,
    FeeWithdrawalResponse,
)
from votekeeper.services.clock import HeightClock
from votekeeper.services.delegation import DelegationGraph
from votekeeper.services.eligibility import VoterEligibility
from votekeeper.services.finalization import FinalizationGate, meets_win_threshold
from votekeeper.services.ledger import Ledger
from votekeeper.services.options import OptionRegistry, MAX_OPTIONS
from votekeeper.services.rounds import RoundController
from votekeeper.services.sessions import SessionManager
from votekeeper.services.tally import TallyEngine

logger = logging.getLogger(__name__)


class VotingCore:
    """Single-writer voting state machine bound to one database session."""

    def __init__(
        self,
        db: AsyncSession,
        clock: HeightClock,
        ledger: Ledger,
        administrator: str,
    ):
        self.db = db
        self.clock = clock
        self.ledger = ledger
        self.administrator = administrator

        self.options = OptionRegistry(db)
        self.eligibility = VoterEligibility(db, ledger)
        self.delegation = DelegationGraph(db, self.eligibility)
        self.tally = TallyEngine(db, self.options, self.eligibility, self.delegation, ledger)
        self.rounds = RoundController(db, self.options)
        self.sessions = SessionManager(db, self.options)
        self.finalization = FinalizationGate(db, self.options)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _state(self) -> CoreState:
        return await self.sessions.get_state(self.administrator)

    async def _peek_state(self) -> CoreState:
        return await self.sessions.peek_state(self.administrator)

    async def _admin_state(self, caller: str) -> CoreState:
        state = await self._state()
        if caller != state.administrator:
            raise Unauthorized(f"{caller} is not the administrator")
        return state

    async def _current(self, state: CoreState) -> VotingSession:
        return await self.sessions.current_session(state)

    # ------------------------------------------------------------------
    # Session lifecycle (administrator)
    # ------------------------------------------------------------------

    async def start_session(
        self,
        caller: str,
        question: str,
        duration: int,
        options: Sequence[str],
    ) -> VotingSession:
        state = await self._admin_state(caller)
        height = self.clock.current_height()
        return await self.sessions.start(state, caller, question, duration, options, height)

    async def add_option(self, caller: str, text: str) -> BallotOption:
        state = await self._admin_state(caller)
        session = await self._current(state)
        return await self.sessions.add_option(session, text)

    async def configure(
        self,
        caller: str,
        voting_format: VotingFormat = VotingFormat.SIMPLE,
        quorum_threshold: int = 0,
        win_threshold: int = 50,
        max_rounds: int = 1,
        allow_delegation: bool = False,
        allow_vote_changing: bool = False,
        require_minimum_balance: bool = False,
        minimum_balance: int = 0,
        fee_amount: int = 0,
    ) -> VotingSession:
        state = await self._admin_state(caller)
        session = await self._current(state)
        return await self.sessions.configure(
            session,
            voting_format=voting_format,
            quorum_threshold=quorum_threshold,
            win_threshold=win_threshold,
            max_rounds=max_rounds,
            allow_delegation=allow_delegation,
            allow_vote_changing=allow_vote_changing,
            require_minimum_balance=require_minimum_balance,
            minimum_balance=minimum_balance,
            fee_amount=fee_amount,
        )

    async def end_session(self, caller: str) -> VotingSession:
        state = await self._admin_state(caller)
        session = await self._current(state)
        return await self.sessions.end(session)

    async def set_voter_weight(self, caller: str, voter: str, weight: int) -> VoterWeight:
        state = await self._admin_state(caller)
        session = self.sessions.require_open(await self._current(state))
        if session.voting_format != VotingFormat.WEIGHTED:
            raise InvalidConfig("Voter weights apply to the weighted format only")
        if weight < 1:
            raise InvalidConfig("Weight must be at least 1")
        record = await self.delegation.set_voter_weight(voter, weight)
        logger.info(f"Voter weight set: voter={voter} weight={weight}")
        return record

    async def authorize(self, caller: str, voter: str) -> VoterAuthorization:
        await self._admin_state(caller)
        return await self.eligibility.set_authorization(voter, True)

    async def revoke_authorization(self, caller: str, voter: str) -> VoterAuthorization:
        await self._admin_state(caller)
        return await self.eligibility.set_authorization(voter, False)

    async def process_next_round(self, caller: str) -> RoundResult:
        state = await self._admin_state(caller)
        session = self.sessions.require_open(await self._current(state))
        height = self.clock.current_height()
        return await self.rounds.advance(session, height)

    async def finalize(self, caller: str) -> FinalizeResponse:
        state = await self._admin_state(caller)
        session = await self._current(state)
        height = self.clock.current_height()
        options, winner = await self.finalization.finalize(session, height)
        return FinalizeResponse(
            session_id=session.id,
            question=session.question,
            start_height=session.start_height,
            end_height=session.end_height,
            finalized_height=session.finalized_height,
            round=session.current_round,
            total_votes=session.total_votes,
            total_weight=session.total_weight,
            options=[OptionResponse.model_validate(o) for o in options],
            winner=OptionResponse.model_validate(winner) if winner else None,
            winner_meets_threshold=meets_win_threshold(session, winner),
        )

    async def withdraw_fees(self, caller: str) -> FeeWithdrawalResponse:
        state = await self._admin_state(caller)
        amount = state.fee_balance
        if amount <= 0:
            raise NotFound("No fees to withdraw")

        await self.ledger.transfer(
            self.ledger.escrow_address,
            state.administrator,
            amount,
            memo="fee withdrawal",
        )
        state.fee_balance = 0
        await self.db.flush()

        logger.info(f"Fees withdrawn: recipient={state.administrator} amount={amount}")
        return FeeWithdrawalResponse(recipient=state.administrator, amount=amount)

    # ------------------------------------------------------------------
    # Voting (public)
    # ------------------------------------------------------------------

    async def cast_vote(
        self,
        caller: str,
        option_id: int,
        ranking: Optional[Sequence[int]] = None,
    ) -> VoteReceipt:
        state = await self._state()
        session = await self._current(state)
        height = self.clock.current_height()
        record = await self.tally.cast(state, session, caller, option_id, ranking, height)
        return VoteReceipt(
            session_id=session.id,
            option_id=record.option_id,
            weight=record.weight,
            round=record.round,
        )

    async def delegate(self, caller: str, delegate: str) -> Delegation:
        state = await self._state()
        session = await self._current(state)
        height = self.clock.current_height()
        return await self.delegation.delegate(session, caller, delegate, height)

    async def revoke_delegation(self, caller: str) -> Delegation:
        state = await self._state()
        session = await self._current(state)
        if session.finalized:
            raise AlreadyFinalized()
        return await self.delegation.revoke(session, caller)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_session(self, session_id: Optional[int] = None) -> VotingSession:
        return await self.sessions.find_session(session_id, await self._peek_state())

    async def list_sessions(self) -> list[VotingSession]:
        return await self.sessions.list_sessions()

    async def get_option(self, option_id: int, session_id: Optional[int] = None) -> BallotOption:
        session = await self.get_session(session_id)
        option = await self.options.get(session.id, option_id)
        if option is None:
            raise NotFound(f"Option {option_id} not found in session {session.id}")
        return option

    async def get_voter_record(self, voter: str, round_number: Optional[int] = None) -> VoterRecord:
        session = await self.get_session()
        round_number = round_number or session.current_round
        record = await self.tally.get_record(session.id, voter, round_number)
        if record is None:
            raise NotFound(f"{voter} has not voted in round {round_number} of session {session.id}")
        return record

    async def voter_history(self, voter: str) -> VoterHistoryResponse:
        stats = await self.tally.get_stats(voter)
        records = await self.tally.list_records(voter)
        return VoterHistoryResponse(
            stats=VoterStatsResponse.model_validate(stats) if stats else VoterStatsResponse(voter=voter),
            records=[VoterRecordResponse.model_validate(r) for r in records],
        )

    async def delegation_info(self, voter: str) -> DelegationInfoResponse:
        session = await self.get_session()
        edge = await self.delegation.get_edge(session.id, voter)
        received = await self.delegation.list_received(session.id, voter)
        own = await self.delegation.own_weight(session, voter)
        delegated = await self.delegation.delegated_weight(session.id, voter)
        return DelegationInfoResponse(
            voter=voter,
            session_id=session.id,
            delegated_to=DelegationResponse.model_validate(edge) if edge else None,
            received=[DelegationResponse.model_validate(d) for d in received],
            delegated_weight=delegated,
            own_weight=own,
            effective_weight=own + delegated,
        )

    async def effective_weight(self, voter: str) -> int:
        session = await self.get_session()
        return await self.delegation.effective_weight(session, voter)

    async def is_eligible(self, voter: str) -> bool:
        state = await self._peek_state()
        session = None
        if state.current_session_id is not None:
            session = await self._current(state)
        return await self.eligibility.is_eligible(session, voter)

    async def detailed_results(self, session_id: Optional[int] = None) -> DetailedResultsResponse:
        session = await self.get_session(session_id)
        registered = {o.option_id: o for o in await self.options.list_options(session.id)}
        slots = [
            OptionResponse.model_validate(registered[slot]) if slot in registered else None
            for slot in range(1, MAX_OPTIONS + 1)
        ]
        return DetailedResultsResponse(
            session_id=session.id,
            status=session.status,
            current_round=session.current_round,
            total_votes=session.total_votes,
            total_weight=session.total_weight,
            slots=slots,
        )

    async def round_info(self, session_id: Optional[int] = None) -> RoundInfoResponse:
        session = await self.get_session(session_id)
        results = await self.rounds.list_results(session.id)
        return RoundInfoResponse(
            session_id=session.id,
            current_round=session.current_round,
            max_rounds=session.max_rounds,
            total_votes=session.total_votes,
            quorum_threshold=session.quorum_threshold,
            results=[RoundResultResponse.model_validate(r) for r in results],
        )

    async def current_leader(self, session_id: Optional[int] = None) -> LeaderResponse:
        session = await self.get_session(session_id)
        leader = await self.finalization.current_leader(session)
        return LeaderResponse(
            session_id=session.id,
            option=OptionResponse.model_validate(leader) if leader else None,
        )

    async def analytics(self) -> AnalyticsResponse:
        state = await self._peek_state()
        average = 0.0
        if state.session_count > 0:
            average = round(state.total_participation / state.session_count, 2)
        return AnalyticsResponse(
            session_count=state.session_count,
            total_participation=state.total_participation,
            average_participation=average,
        )
