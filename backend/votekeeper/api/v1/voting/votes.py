"""
Ballot endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from votekeeper.core.deps import get_current_caller, get_voting_core
from votekeeper.services.voting_core import VotingCore
from votekeeper.schemas.voting import VoteCreate, VoteReceipt, VoterRecordResponse

router = APIRouter()


@router.post("", response_model=VoteReceipt)
async def cast_vote(
    data: VoteCreate,
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """
    Cast the caller's vote in the current round.
    Charges the session fee, if any, before the vote is recorded.
    """
    return await core.cast_vote(caller, data.option_id, data.ranking)


@router.get("/{voter}", response_model=VoterRecordResponse)
async def get_voter_record(
    voter: str,
    round_number: Optional[int] = Query(None, alias="round", ge=1),
    core: VotingCore = Depends(get_voting_core),
):
    """Stored ballot of a voter in the current session (current round by default)."""
    record = await core.get_voter_record(voter, round_number)
    return VoterRecordResponse.model_validate(record)
