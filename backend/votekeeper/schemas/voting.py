"""
Voting session, ballot and result schemas.
"""
from typing import Annotated, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from votekeeper.models.session import VotingFormat, SessionStatus


# ============================================================================
# Requests
# ============================================================================

class SessionStart(BaseModel):
    """Start a new session. Between 2 and 5 options are required."""
    question: str = Field(..., min_length=1, max_length=500)
    duration: int  # heights the voting window stays open
    options: list[Annotated[str, Field(min_length=1, max_length=100)]]


class OptionCreate(BaseModel):
    """Append an option to the open session."""
    text: str = Field(..., min_length=1, max_length=100)


class SessionConfigure(BaseModel):
    """Session configuration; every field is applied."""
    voting_format: VotingFormat = VotingFormat.SIMPLE
    quorum_threshold: int = 0
    win_threshold: int = 50
    max_rounds: int = 1
    allow_delegation: bool = False
    allow_vote_changing: bool = False
    require_minimum_balance: bool = False
    minimum_balance: int = 0
    fee_amount: int = 0


class VoterWeightUpdate(BaseModel):
    """Explicit weight for the weighted format."""
    weight: int


class VoteCreate(BaseModel):
    """Cast a vote for an option; ranking is kept in the ranked format."""
    option_id: int
    ranking: Optional[list[int]] = None


class DelegationCreate(BaseModel):
    """Delegate the caller's weight."""
    delegate: str = Field(..., min_length=1, max_length=128)


# ============================================================================
# Responses
# ============================================================================

class SessionResponse(BaseModel):
    """Session status."""
    id: int
    question: str
    start_height: int
    end_height: int
    status: SessionStatus
    active: bool
    finalized: bool
    voting_format: VotingFormat
    quorum_threshold: int
    win_threshold: int
    max_rounds: int
    current_round: int
    fee_amount: int
    fees_collected: int
    allow_delegation: bool
    allow_vote_changing: bool
    require_minimum_balance: bool
    minimum_balance: int
    total_votes: int
    total_weight: int
    winner_option_id: Optional[int] = None
    finalized_height: Optional[int] = None
    created_by: str
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class OptionResponse(BaseModel):
    """Option detail."""
    session_id: int
    option_id: int
    text: str
    votes: int
    weight: int
    active: bool

    class Config:
        from_attributes = True


class VoteReceipt(BaseModel):
    """Result of a cast: the option voted for, weight applied, round."""
    session_id: int
    option_id: int
    weight: int
    round: int


class VoterRecordResponse(BaseModel):
    """Stored ballot of a voter for one round."""
    session_id: int
    voter: str
    round: int
    option_id: int
    weight: int
    height: int
    ranking: Optional[list[int]] = None

    class Config:
        from_attributes = True


class VoterStatsResponse(BaseModel):
    voter: str
    votes_cast: int = 0
    last_session_id: Optional[int] = None
    last_height: Optional[int] = None

    class Config:
        from_attributes = True


class VoterHistoryResponse(BaseModel):
    """Participation summary and every stored ballot of a voter."""
    stats: VoterStatsResponse
    records: list[VoterRecordResponse]


class VoterWeightResponse(BaseModel):
    voter: str
    weight: int

    class Config:
        from_attributes = True


class AuthorizationResponse(BaseModel):
    voter: str
    authorized: bool

    class Config:
        from_attributes = True


class EligibilityResponse(BaseModel):
    voter: str
    eligible: bool


class DelegationResponse(BaseModel):
    """A delegation edge."""
    session_id: int
    delegator: str
    delegate: str
    weight: int
    height: int

    class Config:
        from_attributes = True


class DelegationInfoResponse(BaseModel):
    """Delegation state of one address in the current session."""
    voter: str
    session_id: int
    delegated_to: Optional[DelegationResponse] = None
    received: list[DelegationResponse] = []
    delegated_weight: int
    own_weight: int
    effective_weight: int


class RoundResultResponse(BaseModel):
    session_id: int
    round: int
    leading_option_id: Optional[int] = None
    total_votes: int
    total_weight: int
    quorum_met: bool
    closed_height: int

    class Config:
        from_attributes = True


class RoundInfoResponse(BaseModel):
    session_id: int
    current_round: int
    max_rounds: int
    total_votes: int
    quorum_threshold: int
    results: list[RoundResultResponse]


class LeaderResponse(BaseModel):
    """Current leader; ``option`` is null before the first vote."""
    session_id: int
    option: Optional[OptionResponse] = None


class DetailedResultsResponse(BaseModel):
    """Fixed slots for options 1-10; unregistered slots are null."""
    session_id: int
    status: SessionStatus
    current_round: int
    total_votes: int
    total_weight: int
    slots: list[Optional[OptionResponse]]


class FinalizeResponse(BaseModel):
    """Frozen tally of a finalized session."""
    session_id: int
    question: str
    start_height: int
    end_height: int
    finalized_height: int
    round: int
    total_votes: int
    total_weight: int
    options: list[OptionResponse]
    winner: Optional[OptionResponse] = None
    winner_meets_threshold: bool


class AnalyticsResponse(BaseModel):
    session_count: int
    total_participation: int
    average_participation: float


class FeeWithdrawalResponse(BaseModel):
    recipient: str
    amount: int
