"""
Ballot option model.
"""
from sqlalchemy import String, Boolean, Integer, BigInteger, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from votekeeper.models.base import BaseModel


class BallotOption(BaseModel):
    """Option on the ballot of one session (option ids 1..10)."""
    __tablename__ = "ballot_options"
    __table_args__ = (
        UniqueConstraint("session_id", "option_id", name="uq_ballot_options_session_option"),
    )

    session_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("voting_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    option_id: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(String(100), nullable=False)

    votes: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    weight: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<BallotOption {self.session_id}/{self.option_id} {self.text}>"
