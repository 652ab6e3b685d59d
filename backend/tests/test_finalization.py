"""
Tests for finalization and leader computation.
"""
import pytest

from votekeeper.core.exceptions import (
    AlreadyFinalized, SessionActive, QuorumNotMet, Unauthorized, SessionNotActive, VotingEnded,
)
from votekeeper.models.session import SessionStatus

from conftest import ADMIN


async def close_window(core, clock):
    await core.end_session(ADMIN)
    clock.advance(100)


class TestFinalize:
    """Test the one-shot finalize."""

    @pytest.mark.asyncio
    async def test_finalize_once(self, core, open_session, clock):
        await core.cast_vote("voter1", 2)
        await core.cast_vote("voter2", 2)
        await core.cast_vote("voter3", 1)
        await close_window(core, clock)

        result = await core.finalize(ADMIN)

        assert result.session_id == open_session.id
        assert result.total_votes == 3
        assert result.winner.option_id == 2
        assert result.winner.text == "Blue"
        assert result.winner_meets_threshold is True
        assert result.finalized_height == clock.height
        assert [o.votes for o in result.options] == [1, 2]

        with pytest.raises(AlreadyFinalized):
            await core.finalize(ADMIN)

        session = await core.get_session()
        assert session.finalized is True
        assert session.winner_option_id == 2
        assert session.status == SessionStatus.FINALIZED

    @pytest.mark.asyncio
    async def test_finalize_requires_ended_session(self, core, open_session, clock):
        clock.advance(100)
        with pytest.raises(SessionActive):
            await core.finalize(ADMIN)

    @pytest.mark.asyncio
    async def test_finalize_requires_end_height(self, core, open_session, clock):
        await core.end_session(ADMIN)
        clock.advance(50)
        with pytest.raises(SessionActive):
            await core.finalize(ADMIN)
        assert (await core.get_session()).finalized is False

    @pytest.mark.asyncio
    async def test_finalize_requires_quorum(self, core, open_session, clock):
        await core.configure(ADMIN, quorum_threshold=2)
        await core.cast_vote("voter1", 1)
        await close_window(core, clock)

        with pytest.raises(QuorumNotMet):
            await core.finalize(ADMIN)

    @pytest.mark.asyncio
    async def test_finalize_requires_admin(self, core, open_session, clock):
        await close_window(core, clock)
        with pytest.raises(Unauthorized):
            await core.finalize("voter1")

    @pytest.mark.asyncio
    async def test_finalized_session_is_frozen(self, core, open_session, clock):
        await core.cast_vote("voter1", 1)
        await close_window(core, clock)
        await core.finalize(ADMIN)

        with pytest.raises(VotingEnded):
            await core.cast_vote("voter2", 1)
        with pytest.raises(SessionNotActive):
            await core.configure(ADMIN, quorum_threshold=1)
        with pytest.raises(SessionNotActive):
            await core.add_option(ADMIN, "Late")
        assert (await core.get_session()).total_votes == 1

    @pytest.mark.asyncio
    async def test_winner_below_threshold(self, core, open_session, clock):
        await core.add_option(ADMIN, "Green")
        await core.configure(ADMIN, win_threshold=60)
        await core.cast_vote("voter1", 1)
        await core.cast_vote("voter2", 2)
        await core.cast_vote("voter3", 3)
        await core.cast_vote("voter4", 1)
        await close_window(core, clock)

        result = await core.finalize(ADMIN)
        assert result.winner.option_id == 1
        assert result.winner_meets_threshold is False

    @pytest.mark.asyncio
    async def test_finalize_without_votes(self, core, open_session, clock):
        await close_window(core, clock)
        result = await core.finalize(ADMIN)
        assert result.winner is None
        assert result.winner_meets_threshold is False


class TestCurrentLeader:
    """The leader is taken across every registered option."""

    @pytest.mark.asyncio
    async def test_leader_beyond_first_two_options(self, core, open_session):
        await core.add_option(ADMIN, "Green")
        await core.cast_vote("voter1", 1)
        await core.cast_vote("voter2", 3)
        await core.cast_vote("voter3", 3)

        leader = await core.current_leader()
        assert leader.option.option_id == 3

    @pytest.mark.asyncio
    async def test_leader_tie_goes_to_lower_id(self, core, open_session):
        await core.cast_vote("voter1", 2)
        await core.cast_vote("voter2", 1)

        leader = await core.current_leader()
        assert leader.option.option_id == 1

    @pytest.mark.asyncio
    async def test_no_leader_before_votes(self, core, open_session):
        leader = await core.current_leader()
        assert leader.option is None

    @pytest.mark.asyncio
    async def test_detailed_results_slots(self, core, open_session):
        await core.cast_vote("voter1", 2)

        results = await core.detailed_results()
        assert len(results.slots) == 10
        assert results.slots[0].text == "Red"
        assert results.slots[1].votes == 1
        assert all(slot is None for slot in results.slots[2:])
