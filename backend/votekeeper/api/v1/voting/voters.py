"""
Voter administration and lookup endpoints.
"""
from fastapi import APIRouter, Depends

from votekeeper.core.deps import get_current_caller, get_voting_core
from votekeeper.services.voting_core import VotingCore
from votekeeper.schemas.voting import (
    VoterWeightUpdate, VoterWeightResponse, AuthorizationResponse,
    EligibilityResponse, VoterHistoryResponse,
)

router = APIRouter()


@router.put("/{voter}/weight", response_model=VoterWeightResponse)
async def set_voter_weight(
    voter: str,
    data: VoterWeightUpdate,
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """
    Set an explicit weight (weighted format only).
    Requires the administrator.
    """
    record = await core.set_voter_weight(caller, voter, data.weight)
    return VoterWeightResponse.model_validate(record)


@router.post("/{voter}/authorize", response_model=AuthorizationResponse)
async def authorize_voter(
    voter: str,
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """Requires the administrator."""
    return AuthorizationResponse.model_validate(await core.authorize(caller, voter))


@router.post("/{voter}/revoke", response_model=AuthorizationResponse)
async def revoke_voter(
    voter: str,
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """Requires the administrator."""
    return AuthorizationResponse.model_validate(await core.revoke_authorization(caller, voter))


@router.get("/{voter}/eligibility", response_model=EligibilityResponse)
async def check_eligibility(voter: str, core: VotingCore = Depends(get_voting_core)):
    return EligibilityResponse(voter=voter, eligible=await core.is_eligible(voter))


@router.get("/{voter}/history", response_model=VoterHistoryResponse)
async def voter_history(voter: str, core: VotingCore = Depends(get_voting_core)):
    """Participation counter and every stored ballot of a voter."""
    return await core.voter_history(voter)
