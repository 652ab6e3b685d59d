"""
Delegation models.
"""
from sqlalchemy import String, Integer, BigInteger, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from votekeeper.models.base import BaseModel


class Delegation(BaseModel):
    """Delegator -> delegate edge; ``weight`` is what the edge added."""
    __tablename__ = "delegations"
    __table_args__ = (
        UniqueConstraint("session_id", "delegator", name="uq_delegations_session_delegator"),
    )

    session_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("voting_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    delegator: Mapped[str] = mapped_column(String(128), nullable=False)
    delegate: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    weight: Mapped[int] = mapped_column(BigInteger, nullable=False)
    height: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<Delegation {self.delegator} -> {self.delegate} ({self.weight})>"


class DelegatedWeight(BaseModel):
    """Running total of weight delegated to one delegate."""
    __tablename__ = "delegated_weights"
    __table_args__ = (
        UniqueConstraint("session_id", "delegate", name="uq_delegated_weights_session_delegate"),
    )

    session_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("voting_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    delegate: Mapped[str] = mapped_column(String(128), nullable=False)
    weight: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
