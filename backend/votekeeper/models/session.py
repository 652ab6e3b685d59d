"""
Voting session model.
"""
from typing import Optional
from sqlalchemy import String, Text, Boolean, Integer, BigInteger, Enum
from sqlalchemy.orm import Mapped, mapped_column
import enum
from votekeeper.models.base import BaseModel


class VotingFormat(str, enum.Enum):
    """Ballot format."""
    SIMPLE = "simple"
    WEIGHTED = "weighted"
    DELEGATED = "delegated"
    RANKED = "ranked"


class SessionStatus(str, enum.Enum):
    """Lifecycle status derived from the active/finalized flags."""
    OPEN = "open"
    CLOSED = "closed"
    FINALIZED = "finalized"


class VotingSession(BaseModel):
    """One complete voting exercise.

    Rows are never deleted; past sessions are the session history.
    """
    __tablename__ = "voting_sessions"

    question: Mapped[str] = mapped_column(Text, nullable=False)

    # Voting window (heights)
    start_height: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_height: Mapped[int] = mapped_column(BigInteger, nullable=False)

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    finalized: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    voting_format: Mapped[VotingFormat] = mapped_column(
        Enum(VotingFormat, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=VotingFormat.SIMPLE
    )

    # Thresholds
    quorum_threshold: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    win_threshold: Mapped[int] = mapped_column(Integer, default=50, nullable=False)

    # Rounds
    max_rounds: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    current_round: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Fees
    fee_amount: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    fees_collected: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    # Flags
    allow_delegation: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    allow_vote_changing: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    require_minimum_balance: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    minimum_balance: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    # Round totals
    total_votes: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    total_weight: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    # Outcome
    winner_option_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    finalized_height: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)

    @property
    def status(self) -> SessionStatus:
        if self.finalized:
            return SessionStatus.FINALIZED
        if self.active:
            return SessionStatus.OPEN
        return SessionStatus.CLOSED

    def __repr__(self) -> str:
        return f"<VotingSession {self.id} {self.status.value}>"
