"""
FastAPI dependencies: caller identity, height clock and the voting core.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from votekeeper.core.config import settings
from votekeeper.core.security import verify_token
from votekeeper.db.base import get_db
from votekeeper.services.clock import HeightClock, BlockClock
from votekeeper.services.ledger import Ledger
from votekeeper.services.voting_core import VotingCore

bearer_scheme = HTTPBearer(auto_error=False)

_clock = BlockClock(settings.GENESIS_TIME, settings.BLOCK_SECONDS)


async def get_current_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Resolve the caller address from the bearer token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    address = verify_token(credentials.credentials)
    if not address:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return address


def get_clock() -> HeightClock:
    return _clock


async def get_voting_core(
    db: AsyncSession = Depends(get_db),
    clock: HeightClock = Depends(get_clock),
) -> VotingCore:
    ledger = Ledger(db, settings.ESCROW_ADDRESS)
    return VotingCore(db, clock, ledger, settings.ADMIN_ADDRESS)
