"""
Voter models: cast records, explicit weights, authorization and stats.
"""
from typing import Optional
from sqlalchemy import String, Boolean, Integer, BigInteger, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from votekeeper.models.base import BaseModel


class VoterRecord(BaseModel):
    """A voter's live ballot for one round of one session."""
    __tablename__ = "voter_records"
    __table_args__ = (
        UniqueConstraint("session_id", "voter", "round", name="uq_voter_records_session_voter_round"),
    )

    session_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("voting_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    voter: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    round: Mapped[int] = mapped_column(Integer, nullable=False)

    option_id: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[int] = mapped_column(BigInteger, nullable=False)
    height: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Ranked format only, stored as given
    ranking: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<VoterRecord {self.voter} -> {self.option_id} (session {self.session_id}, round {self.round})>"


class VoterWeight(BaseModel):
    """Explicit voting weight, used by the weighted format."""
    __tablename__ = "voter_weights"

    voter: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    weight: Mapped[int] = mapped_column(BigInteger, nullable=False)


class VoterAuthorization(BaseModel):
    """Explicit authorization record; absence means the voter is allowed."""
    __tablename__ = "voter_authorizations"

    voter: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    authorized: Mapped[bool] = mapped_column(Boolean, nullable=False)


class VoterStats(BaseModel):
    """Participation counter across sessions."""
    __tablename__ = "voter_stats"

    voter: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    votes_cast: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_session_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    last_height: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
