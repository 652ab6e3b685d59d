"""
Delegation endpoints.
"""
from fastapi import APIRouter, Depends, status

from votekeeper.core.deps import get_current_caller, get_voting_core
from votekeeper.services.voting_core import VotingCore
from votekeeper.schemas.voting import DelegationCreate, DelegationResponse, DelegationInfoResponse

router = APIRouter()


@router.post("", response_model=DelegationResponse, status_code=status.HTTP_201_CREATED)
async def delegate(
    data: DelegationCreate,
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """Delegate the caller's own weight to another eligible voter."""
    edge = await core.delegate(caller, data.delegate)
    return DelegationResponse.model_validate(edge)


@router.delete("", response_model=DelegationResponse)
async def revoke_delegation(
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """Remove the caller's delegation and take back the weight it added."""
    edge = await core.revoke_delegation(caller)
    return DelegationResponse.model_validate(edge)


@router.get("/{voter}", response_model=DelegationInfoResponse)
async def get_delegation_info(voter: str, core: VotingCore = Depends(get_voting_core)):
    """Outgoing edge, received delegations and effective weight of a voter."""
    return await core.delegation_info(voter)
