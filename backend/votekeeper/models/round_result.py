"""
Round result model.
"""
from typing import Optional
from sqlalchemy import Boolean, Integer, BigInteger, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from votekeeper.models.base import BaseModel


class RoundResult(BaseModel):
    """Snapshot of a closed round. Written once, never updated."""
    __tablename__ = "round_results"
    __table_args__ = (
        UniqueConstraint("session_id", "round", name="uq_round_results_session_round"),
    )

    session_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("voting_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    leading_option_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_votes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_weight: Mapped[int] = mapped_column(BigInteger, nullable=False)
    quorum_met: Mapped[bool] = mapped_column(Boolean, nullable=False)
    closed_height: Mapped[int] = mapped_column(BigInteger, nullable=False)
