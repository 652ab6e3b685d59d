"""
Option registry for the current session.

Options are numbered 1..MAX_OPTIONS in registration order; a new session
starts with a fresh set.
"""
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from votekeeper.core.exceptions import CapacityExceeded, InvalidConfig
from votekeeper.models.option import BallotOption

MAX_OPTIONS = 10
MAX_OPTION_TEXT = 100


def leading_option(options: Sequence[BallotOption]) -> Optional[BallotOption]:
    """Option with the most raw votes, ties toward the lower id; None before any vote."""
    leader = None
    for option in sorted(options, key=lambda o: o.option_id):
        if leader is None or option.votes > leader.votes:
            leader = option
    if leader is None or leader.votes == 0:
        return None
    return leader


class OptionRegistry:
    """Bounded option set of a session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def check_text(text: str) -> str:
        if not 1 <= len(text) <= MAX_OPTION_TEXT:
            raise InvalidConfig(f"Option text must be 1 to {MAX_OPTION_TEXT} characters")
        return text

    async def list_options(self, session_id: int) -> list[BallotOption]:
        result = await self.db.execute(
            select(BallotOption)
            .where(BallotOption.session_id == session_id)
            .order_by(BallotOption.option_id)
        )
        return list(result.scalars().all())

    async def get(self, session_id: int, option_id: int) -> Optional[BallotOption]:
        result = await self.db.execute(
            select(BallotOption).where(
                BallotOption.session_id == session_id,
                BallotOption.option_id == option_id
            )
        )
        return result.scalar_one_or_none()

    async def count(self, session_id: int) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(BallotOption).where(
                BallotOption.session_id == session_id
            )
        )
        return result.scalar() or 0

    async def register(self, session_id: int, texts: Sequence[str]) -> list[BallotOption]:
        """Register the opening options of a fresh session as ids 1..n."""
        if len(texts) > MAX_OPTIONS:
            raise CapacityExceeded(f"A session holds at most {MAX_OPTIONS} options")

        options = [
            BallotOption(session_id=session_id, option_id=index, text=text)
            for index, text in enumerate(texts, start=1)
        ]
        self.db.add_all(options)
        await self.db.flush()
        return options

    async def add(self, session_id: int, text: str) -> BallotOption:
        self.check_text(text)
        existing = await self.count(session_id)
        if existing >= MAX_OPTIONS:
            raise CapacityExceeded(f"A session holds at most {MAX_OPTIONS} options")

        option = BallotOption(session_id=session_id, option_id=existing + 1, text=text)
        self.db.add(option)
        await self.db.flush()
        return option

    async def reset_tallies(self, session_id: int) -> None:
        for option in await self.list_options(session_id):
            option.votes = 0
            option.weight = 0
        await self.db.flush()
