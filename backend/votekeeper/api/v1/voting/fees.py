"""
Fee endpoints.
"""
from fastapi import APIRouter, Depends

from votekeeper.core.deps import get_current_caller, get_voting_core
from votekeeper.services.voting_core import VotingCore
from votekeeper.schemas.voting import FeeWithdrawalResponse

router = APIRouter()


@router.post("/withdraw", response_model=FeeWithdrawalResponse)
async def withdraw_fees(
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """
    Send every collected, undisbursed fee to the administrator.
    Requires the administrator.
    """
    return await core.withdraw_fees(caller)
