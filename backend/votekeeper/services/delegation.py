"""
Delegation graph.

Each delegator holds at most one outgoing edge per session. The edge stores
the weight it added to the delegate so revoking subtracts exactly that,
even if the delegator's own weight changed in between.
"""
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from votekeeper.core.exceptions import (
    DelegationNotAllowed,
    SessionNotActive,
    SelfDelegation,
    Ineligible,
    NotFound,
)
from votekeeper.models.delegation import Delegation, DelegatedWeight
from votekeeper.models.session import VotingSession, VotingFormat
from votekeeper.models.voter import VoterWeight
from votekeeper.services.eligibility import VoterEligibility

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 1


class DelegationGraph:
    """Delegator -> delegate edges and the weight they carry."""

    def __init__(self, db: AsyncSession, eligibility: VoterEligibility):
        self.db = db
        self.eligibility = eligibility

    # ------------------------------------------------------------------
    # Weights
    # ------------------------------------------------------------------

    async def get_voter_weight(self, voter: str) -> Optional[VoterWeight]:
        result = await self.db.execute(
            select(VoterWeight).where(VoterWeight.voter == voter)
        )
        return result.scalar_one_or_none()

    async def set_voter_weight(self, voter: str, weight: int) -> VoterWeight:
        record = await self.get_voter_weight(voter)
        if record is None:
            record = VoterWeight(voter=voter, weight=weight)
            self.db.add(record)
        else:
            record.weight = weight
        await self.db.flush()
        return record

    async def own_weight(self, session: VotingSession, voter: str) -> int:
        """Explicit weight in the weighted format, the default weight otherwise."""
        if session.voting_format != VotingFormat.WEIGHTED:
            return DEFAULT_WEIGHT
        record = await self.get_voter_weight(voter)
        if record is None:
            return DEFAULT_WEIGHT
        return record.weight

    async def _get_received(self, session_id: int, delegate: str) -> Optional[DelegatedWeight]:
        result = await self.db.execute(
            select(DelegatedWeight).where(
                DelegatedWeight.session_id == session_id,
                DelegatedWeight.delegate == delegate
            )
        )
        return result.scalar_one_or_none()

    async def delegated_weight(self, session_id: int, voter: str) -> int:
        received = await self._get_received(session_id, voter)
        return received.weight if received else 0

    async def effective_weight(self, session: VotingSession, voter: str) -> int:
        return await self.own_weight(session, voter) + await self.delegated_weight(session.id, voter)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    async def get_edge(self, session_id: int, delegator: str) -> Optional[Delegation]:
        result = await self.db.execute(
            select(Delegation).where(
                Delegation.session_id == session_id,
                Delegation.delegator == delegator
            )
        )
        return result.scalar_one_or_none()

    async def list_received(self, session_id: int, delegate: str) -> list[Delegation]:
        result = await self.db.execute(
            select(Delegation)
            .where(Delegation.session_id == session_id, Delegation.delegate == delegate)
            .order_by(Delegation.id)
        )
        return list(result.scalars().all())

    async def delegate(
        self,
        session: VotingSession,
        delegator: str,
        delegate: str,
        height: int
    ) -> Delegation:
        if not session.allow_delegation:
            raise DelegationNotAllowed("Delegation is disabled for this session")
        if not session.active or session.finalized or height >= session.end_height:
            raise SessionNotActive()
        if delegator == delegate:
            raise SelfDelegation()
        if not await self.eligibility.is_eligible(session, delegate):
            raise Ineligible(f"{delegate} is not eligible to vote")
        if await self.get_edge(session.id, delegator) is not None:
            raise DelegationNotAllowed("Revoke the existing delegation before delegating again")

        weight = await self.own_weight(session, delegator)

        edge = Delegation(
            session_id=session.id,
            delegator=delegator,
            delegate=delegate,
            weight=weight,
            height=height,
        )
        self.db.add(edge)

        received = await self._get_received(session.id, delegate)
        if received is None:
            received = DelegatedWeight(session_id=session.id, delegate=delegate, weight=0)
            self.db.add(received)
        received.weight += weight
        await self.db.flush()

        logger.info(f"Delegation recorded: session={session.id} {delegator} -> {delegate} weight={weight}")
        return edge

    async def revoke(self, session: VotingSession, delegator: str) -> Delegation:
        edge = await self.get_edge(session.id, delegator)
        if edge is None:
            raise NotFound(f"{delegator} has no delegation in session {session.id}")

        received = await self._get_received(session.id, edge.delegate)
        if received is not None:
            received.weight -= edge.weight

        await self.db.delete(edge)
        await self.db.flush()

        logger.info(f"Delegation revoked: session={session.id} {delegator} -> {edge.delegate} weight={edge.weight}")
        return edge
