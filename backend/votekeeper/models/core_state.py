"""
Core state model.
"""
from typing import Optional
from sqlalchemy import String, Integer, BigInteger
from sqlalchemy.orm import Mapped, mapped_column
from votekeeper.models.base import BaseModel

CORE_STATE_ID = 1


class CoreState(BaseModel):
    """Singleton row holding contract-wide counters.

    ``current_session_id`` points at the session every operation acts on;
    ``fee_balance`` is the escrowed fee amount not yet withdrawn.
    """
    __tablename__ = "core_state"

    administrator: Mapped[str] = mapped_column(String(128), nullable=False)
    current_session_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    session_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_participation: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    fee_balance: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<CoreState admin={self.administrator} session={self.current_session_id}>"
