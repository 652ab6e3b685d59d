"""
Tests for the session lifecycle: start, options, configuration, end, history.
"""
import pytest

from votekeeper.core.exceptions import (
    Unauthorized, SessionActive, SessionNotActive, InvalidConfig, CapacityExceeded, NotFound,
)
from votekeeper.models.core_state import CoreState, CORE_STATE_ID
from votekeeper.models.session import VotingFormat, SessionStatus
from votekeeper.services.sessions import ensure_core_state

from conftest import ADMIN


class TestStartSession:
    """Test starting sessions."""

    @pytest.mark.asyncio
    async def test_start_session_defaults(self, core, clock):
        """A new session opens with safe defaults and registered options."""
        session = await core.start_session(ADMIN, "Favourite colour?", 100, ["Red", "Blue"])

        assert session.id == 1
        assert session.start_height == clock.height
        assert session.end_height == clock.height + 100
        assert session.active is True
        assert session.finalized is False
        assert session.voting_format == VotingFormat.SIMPLE
        assert session.quorum_threshold == 0
        assert session.win_threshold == 50
        assert session.allow_vote_changing is False
        assert session.fee_amount == 0
        assert session.current_round == 1
        assert session.status == SessionStatus.OPEN

        options = await core.options.list_options(session.id)
        assert [(o.option_id, o.text) for o in options] == [(1, "Red"), (2, "Blue")]

    @pytest.mark.asyncio
    async def test_start_session_requires_admin(self, core):
        with pytest.raises(Unauthorized):
            await core.start_session("mallory", "Q?", 100, ["A", "B"])

    @pytest.mark.asyncio
    async def test_start_session_while_open(self, core, open_session):
        """Only one session can be open."""
        with pytest.raises(SessionActive):
            await core.start_session(ADMIN, "Another?", 100, ["A", "B"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("options", [["Only"], ["A", "B", "C", "D", "E", "F"]])
    async def test_start_session_option_count(self, core, options):
        """Sessions start with 2 to 5 options."""
        with pytest.raises(InvalidConfig):
            await core.start_session(ADMIN, "Q?", 100, options)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("texts", [["Red", "x" * 101], ["", "Blue"]])
    async def test_start_session_option_text(self, core, texts):
        """Texts that do not fit an option are refused before anything is stored."""
        with pytest.raises(InvalidConfig):
            await core.start_session(ADMIN, "Favourite colour?", 100, texts)
        assert await core.list_sessions() == []

    @pytest.mark.asyncio
    async def test_start_session_zero_duration(self, core):
        with pytest.raises(InvalidConfig):
            await core.start_session(ADMIN, "Q?", 0, ["A", "B"])

    @pytest.mark.asyncio
    async def test_new_session_after_end_resets_state(self, core, open_session):
        """A new session gets a new id, fresh options and fresh counters."""
        await core.cast_vote("alice", 1)
        await core.end_session(ADMIN)

        second = await core.start_session(ADMIN, "Second?", 50, ["Yes", "No", "Maybe"])

        assert second.id == 2
        assert second.total_votes == 0
        options = await core.options.list_options(second.id)
        assert [o.votes for o in options] == [0, 0, 0]
        # The previous session is kept as history
        first = await core.get_session(1)
        assert first.total_votes == 1
        assert first.status == SessionStatus.CLOSED
        assert [s.id for s in await core.list_sessions()] == [1, 2]


class TestOptions:
    """Test option registration."""

    @pytest.mark.asyncio
    async def test_add_option_up_to_capacity(self, core, open_session):
        for index in range(3, 11):
            option = await core.add_option(ADMIN, f"Option {index}")
            assert option.option_id == index

        with pytest.raises(CapacityExceeded):
            await core.add_option(ADMIN, "Eleventh")

        assert await core.options.count(open_session.id) == 10

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "x" * 101])
    async def test_option_text_bounds(self, core, open_session, text):
        with pytest.raises(InvalidConfig):
            await core.add_option(ADMIN, text)
        assert await core.options.count(open_session.id) == 2

    @pytest.mark.asyncio
    async def test_option_text_at_limit(self, core, open_session):
        option = await core.add_option(ADMIN, "x" * 100)
        assert option.text == "x" * 100

    @pytest.mark.asyncio
    async def test_add_option_requires_open_session(self, core, open_session):
        await core.end_session(ADMIN)
        with pytest.raises(SessionNotActive):
            await core.add_option(ADMIN, "Late")

    @pytest.mark.asyncio
    async def test_add_option_requires_admin(self, core, open_session):
        with pytest.raises(Unauthorized):
            await core.add_option("alice", "Green")

    @pytest.mark.asyncio
    async def test_get_missing_option(self, core, open_session):
        with pytest.raises(NotFound):
            await core.get_option(7)


class TestConfigure:
    """Test session configuration."""

    @pytest.mark.asyncio
    async def test_configure_applies_every_field(self, core, open_session):
        session = await core.configure(
            ADMIN,
            voting_format=VotingFormat.WEIGHTED,
            quorum_threshold=10,
            win_threshold=60,
            max_rounds=3,
            allow_delegation=True,
            allow_vote_changing=True,
            require_minimum_balance=True,
            minimum_balance=500,
            fee_amount=25,
        )
        assert session.voting_format == VotingFormat.WEIGHTED
        assert session.quorum_threshold == 10
        assert session.win_threshold == 60
        assert session.max_rounds == 3
        assert session.allow_delegation is True
        assert session.allow_vote_changing is True
        assert session.require_minimum_balance is True
        assert session.minimum_balance == 500
        assert session.fee_amount == 25

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"win_threshold": 101},
            {"max_rounds": 11},
            {"max_rounds": 0},
            {"fee_amount": -1},
            {"quorum_threshold": -5},
        ],
    )
    async def test_configure_rejects_out_of_bounds(self, core, open_session, overrides):
        with pytest.raises(InvalidConfig):
            await core.configure(ADMIN, **overrides)

        # Nothing was applied
        session = await core.get_session()
        assert session.win_threshold == 50
        assert session.max_rounds == 1
        assert session.fee_amount == 0

    @pytest.mark.asyncio
    async def test_configure_requires_admin(self, core, open_session):
        with pytest.raises(Unauthorized):
            await core.configure("alice", quorum_threshold=1)

    @pytest.mark.asyncio
    async def test_configure_closed_session(self, core, open_session):
        await core.end_session(ADMIN)
        with pytest.raises(SessionNotActive):
            await core.configure(ADMIN, quorum_threshold=1)


class TestEndSession:
    """Test closing sessions."""

    @pytest.mark.asyncio
    async def test_end_session_keeps_tally(self, core, open_session):
        await core.cast_vote("alice", 2)
        session = await core.end_session(ADMIN)

        assert session.active is False
        assert session.finalized is False
        results = await core.detailed_results()
        assert results.total_votes == 1
        assert results.slots[1].votes == 1

    @pytest.mark.asyncio
    async def test_end_session_twice(self, core, open_session):
        await core.end_session(ADMIN)
        with pytest.raises(SessionNotActive):
            await core.end_session(ADMIN)

    @pytest.mark.asyncio
    async def test_end_session_requires_admin(self, core, open_session):
        with pytest.raises(Unauthorized):
            await core.end_session("alice")

    @pytest.mark.asyncio
    async def test_no_session_yet(self, core):
        with pytest.raises(NotFound):
            await core.get_session()
        with pytest.raises(NotFound):
            await core.end_session(ADMIN)


class TestCoreState:
    """Test the contract-wide state row."""

    @pytest.mark.asyncio
    async def test_queries_do_not_write(self, core, db_session):
        analytics = await core.analytics()
        assert analytics.session_count == 0
        assert analytics.average_participation == 0.0
        assert await core.is_eligible("voter1") is True
        with pytest.raises(NotFound):
            await core.get_session()

        assert await db_session.get(CoreState, CORE_STATE_ID) is None

    @pytest.mark.asyncio
    async def test_first_write_creates_state(self, core, db_session):
        await core.start_session(ADMIN, "Favourite colour?", 100, ["Red", "Blue"])
        state = await db_session.get(CoreState, CORE_STATE_ID)
        assert state.administrator == ADMIN
        assert state.session_count == 1

    @pytest.mark.asyncio
    async def test_bootstrapped_administrator_is_kept(self, core, db_session):
        """The stored administrator wins over the one the core was built with."""
        state = await ensure_core_state(db_session, "founder")
        assert await ensure_core_state(db_session, ADMIN) is state

        with pytest.raises(Unauthorized):
            await core.start_session(ADMIN, "Favourite colour?", 100, ["Red", "Blue"])
        session = await core.start_session("founder", "Favourite colour?", 100, ["Red", "Blue"])
        assert session.created_by == "founder"
