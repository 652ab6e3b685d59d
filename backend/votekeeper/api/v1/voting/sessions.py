"""
Session lifecycle endpoints.

Mutations are administrator-only; session status is readable by anyone.
"""
from fastapi import APIRouter, Depends, status

from votekeeper.core.deps import get_current_caller, get_voting_core
from votekeeper.services.voting_core import VotingCore
from votekeeper.schemas.voting import (
    SessionStart, SessionConfigure, SessionResponse, OptionCreate, OptionResponse,
    RoundResultResponse, FinalizeResponse,
)

router = APIRouter()


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    data: SessionStart,
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """
    Start a new voting session with 2 to 5 options.
    Requires the administrator.
    """
    session = await core.start_session(caller, data.question, data.duration, data.options)
    return SessionResponse.model_validate(session)


@router.get("", response_model=list[SessionResponse])
async def list_sessions(core: VotingCore = Depends(get_voting_core)):
    """Session history, oldest first."""
    return [SessionResponse.model_validate(s) for s in await core.list_sessions()]


@router.get("/current", response_model=SessionResponse)
async def get_current_session(core: VotingCore = Depends(get_voting_core)):
    """Status of the current session."""
    return SessionResponse.model_validate(await core.get_session())


@router.put("/current/config", response_model=SessionResponse)
async def configure_session(
    data: SessionConfigure,
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """
    Configure format, thresholds, rounds, flags and fee of the open session.
    Requires the administrator.
    """
    session = await core.configure(caller, **data.model_dump())
    return SessionResponse.model_validate(session)


@router.post("/current/options", response_model=OptionResponse, status_code=status.HTTP_201_CREATED)
async def add_option(
    data: OptionCreate,
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """
    Append an option (up to 10 per session).
    Requires the administrator.
    """
    option = await core.add_option(caller, data.text)
    return OptionResponse.model_validate(option)


@router.get("/current/options/{option_id}", response_model=OptionResponse)
async def get_option(option_id: int, core: VotingCore = Depends(get_voting_core)):
    """Option detail in the current session."""
    return OptionResponse.model_validate(await core.get_option(option_id))


@router.post("/current/end", response_model=SessionResponse)
async def end_session(
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """
    Close voting without finalizing.
    Requires the administrator.
    """
    return SessionResponse.model_validate(await core.end_session(caller))


@router.post("/current/rounds/next", response_model=RoundResultResponse)
async def process_next_round(
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """
    Close the current round and open the next one while quorum is unmet.
    Requires the administrator.
    """
    result = await core.process_next_round(caller)
    return RoundResultResponse.model_validate(result)


@router.post("/current/finalize", response_model=FinalizeResponse)
async def finalize_session(
    caller: str = Depends(get_current_caller),
    core: VotingCore = Depends(get_voting_core),
):
    """
    Freeze the results of an ended session and record the winner.
    Requires the administrator. Succeeds once per session.
    """
    return await core.finalize(caller)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: int, core: VotingCore = Depends(get_voting_core)):
    """Status of any session by id."""
    return SessionResponse.model_validate(await core.get_session(session_id))
