"""
Tests for the delegation graph.
"""
import pytest
import pytest_asyncio

from votekeeper.core.exceptions import (
    DelegationNotAllowed, SelfDelegation, Ineligible, NotFound, SessionNotActive,
    InvalidConfig, AlreadyFinalized,
)
from votekeeper.models.session import VotingFormat

from conftest import ADMIN


@pytest_asyncio.fixture
async def delegating_session(core, open_session):
    await core.configure(ADMIN, allow_delegation=True)
    return open_session


class TestDelegate:
    """Test recording delegations."""

    @pytest.mark.asyncio
    async def test_weighted_delegation(self, core, open_session):
        """A delegator with weight 5 gives its delegate 1 + 5."""
        await core.configure(ADMIN, voting_format=VotingFormat.WEIGHTED, allow_delegation=True)
        await core.set_voter_weight(ADMIN, "v1", 5)

        edge = await core.delegate("v1", "v2")

        assert edge.weight == 5
        assert await core.effective_weight("v2") == 6

        receipt = await core.cast_vote("v2", 1)
        assert receipt.weight == 6

    @pytest.mark.asyncio
    async def test_delegation_disabled(self, core, open_session):
        with pytest.raises(DelegationNotAllowed):
            await core.delegate("v1", "v2")

    @pytest.mark.asyncio
    async def test_self_delegation(self, core, delegating_session):
        with pytest.raises(SelfDelegation):
            await core.delegate("v1", "v1")

    @pytest.mark.asyncio
    async def test_ineligible_delegate(self, core, delegating_session):
        await core.revoke_authorization(ADMIN, "v2")
        with pytest.raises(Ineligible):
            await core.delegate("v1", "v2")
        assert await core.effective_weight("v2") == 1

    @pytest.mark.asyncio
    async def test_closed_session(self, core, delegating_session):
        await core.end_session(ADMIN)
        with pytest.raises(SessionNotActive):
            await core.delegate("v1", "v2")

    @pytest.mark.asyncio
    async def test_redelegation_requires_revoke(self, core, delegating_session):
        """One outgoing edge per delegator."""
        await core.delegate("v1", "v2")
        with pytest.raises(DelegationNotAllowed):
            await core.delegate("v1", "v3")

        assert await core.effective_weight("v2") == 2
        assert await core.effective_weight("v3") == 1

        await core.revoke_delegation("v1")
        await core.delegate("v1", "v3")
        assert await core.effective_weight("v2") == 1
        assert await core.effective_weight("v3") == 2

    @pytest.mark.asyncio
    async def test_delegation_info(self, core, delegating_session):
        await core.delegate("v1", "v3")
        await core.delegate("v2", "v3")

        info = await core.delegation_info("v3")
        assert info.delegated_to is None
        assert sorted(d.delegator for d in info.received) == ["v1", "v2"]
        assert info.delegated_weight == 2
        assert info.own_weight == 1
        assert info.effective_weight == 3

        info = await core.delegation_info("v1")
        assert info.delegated_to.delegate == "v3"


class TestRevoke:
    """Test removing delegations."""

    @pytest.mark.asyncio
    async def test_delegate_then_revoke_restores_weight(self, core, delegating_session):
        await core.delegate("v3", "v2")
        before = await core.effective_weight("v2")

        await core.delegate("v1", "v2")
        assert await core.effective_weight("v2") == before + 1

        await core.revoke_delegation("v1")
        assert await core.effective_weight("v2") == before

    @pytest.mark.asyncio
    async def test_revoke_subtracts_recorded_weight(self, core, open_session):
        """A weight change after delegating does not leak into the revoke."""
        await core.configure(ADMIN, voting_format=VotingFormat.WEIGHTED, allow_delegation=True)
        await core.set_voter_weight(ADMIN, "v1", 4)
        await core.delegate("v1", "v2")
        await core.set_voter_weight(ADMIN, "v1", 9)

        await core.revoke_delegation("v1")
        assert await core.effective_weight("v2") == 1

    @pytest.mark.asyncio
    async def test_revoke_without_edge(self, core, delegating_session):
        with pytest.raises(NotFound):
            await core.revoke_delegation("v1")

    @pytest.mark.asyncio
    async def test_revoke_after_finalize(self, core, delegating_session, clock):
        await core.delegate("v1", "v2")
        await core.end_session(ADMIN)
        clock.advance(100)
        await core.finalize(ADMIN)

        with pytest.raises(AlreadyFinalized):
            await core.revoke_delegation("v1")


class TestVoterWeights:
    """Test explicit weights."""

    @pytest.mark.asyncio
    async def test_weights_only_in_weighted_format(self, core, open_session):
        with pytest.raises(InvalidConfig):
            await core.set_voter_weight(ADMIN, "v1", 3)

    @pytest.mark.asyncio
    async def test_weight_must_be_positive(self, core, open_session):
        await core.configure(ADMIN, voting_format=VotingFormat.WEIGHTED)
        with pytest.raises(InvalidConfig):
            await core.set_voter_weight(ADMIN, "v1", 0)

    @pytest.mark.asyncio
    async def test_weighted_vote(self, core, open_session):
        await core.configure(ADMIN, voting_format=VotingFormat.WEIGHTED)
        await core.set_voter_weight(ADMIN, "v1", 7)

        await core.cast_vote("v1", 1)
        await core.cast_vote("v2", 2)

        assert (await core.get_option(1)).weight == 7
        assert (await core.get_option(2)).weight == 1
        assert (await core.get_session()).total_weight == 8
