"""
Voting module.

This module handles:
- Session lifecycle (start, configure, options, end, rounds, finalize)
- Ballots
- Delegations
- Voter weights, authorization and history
- Results and analytics
- Fee withdrawal

All endpoints are under /api/v1/voting/*.
"""
from fastapi import APIRouter

from votekeeper.schemas.common import ErrorResponse
from votekeeper.api.v1.voting.sessions import router as sessions_router
from votekeeper.api.v1.voting.votes import router as votes_router
from votekeeper.api.v1.voting.delegations import router as delegations_router
from votekeeper.api.v1.voting.voters import router as voters_router
from votekeeper.api.v1.voting.results import router as results_router
from votekeeper.api.v1.voting.fees import router as fees_router

# Combined voting router
voting_router = APIRouter(
    prefix="/voting",
    tags=["voting"],
    responses={
        402: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)

voting_router.include_router(sessions_router, prefix="/sessions", tags=["sessions"])
voting_router.include_router(votes_router, prefix="/votes", tags=["votes"])
voting_router.include_router(delegations_router, prefix="/delegations", tags=["delegations"])
voting_router.include_router(voters_router, prefix="/voters", tags=["voters"])
voting_router.include_router(results_router, prefix="/results", tags=["results"])
voting_router.include_router(fees_router, prefix="/fees", tags=["fees"])

__all__ = [
    "voting_router",
    "sessions_router",
    "votes_router",
    "delegations_router",
    "voters_router",
    "results_router",
    "fees_router",
]
