"""
Result, round and analytics endpoints. All read-only.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from votekeeper.core.deps import get_voting_core
from votekeeper.services.voting_core import VotingCore
from votekeeper.schemas.voting import (
    DetailedResultsResponse, LeaderResponse, RoundInfoResponse, AnalyticsResponse,
)

router = APIRouter()


@router.get("", response_model=DetailedResultsResponse)
async def detailed_results(
    session_id: Optional[int] = Query(None, ge=1),
    core: VotingCore = Depends(get_voting_core),
):
    """Per-option tally in fixed slots 1-10."""
    return await core.detailed_results(session_id)


@router.get("/leader", response_model=LeaderResponse)
async def current_leader(
    session_id: Optional[int] = Query(None, ge=1),
    core: VotingCore = Depends(get_voting_core),
):
    return await core.current_leader(session_id)


@router.get("/rounds", response_model=RoundInfoResponse)
async def round_info(
    session_id: Optional[int] = Query(None, ge=1),
    core: VotingCore = Depends(get_voting_core),
):
    """Current round and snapshots of closed rounds."""
    return await core.round_info(session_id)


@router.get("/analytics", response_model=AnalyticsResponse)
async def analytics(core: VotingCore = Depends(get_voting_core)):
    """Session count and average participation per session."""
    return await core.analytics()
