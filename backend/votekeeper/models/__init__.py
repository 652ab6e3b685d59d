"""
SQLAlchemy models for Votekeeper.
"""
from votekeeper.models.core_state import CoreState, CORE_STATE_ID
from votekeeper.models.session import VotingSession, VotingFormat, SessionStatus
from votekeeper.models.option import BallotOption
from votekeeper.models.voter import VoterRecord, VoterWeight, VoterAuthorization, VoterStats
from votekeeper.models.delegation import Delegation, DelegatedWeight
from votekeeper.models.round_result import RoundResult
from votekeeper.models.ledger import LedgerAccount, LedgerTransfer

__all__ = [
    # Core
    "CoreState",
    "CORE_STATE_ID",
    # Sessions
    "VotingSession",
    "VotingFormat",
    "SessionStatus",
    "BallotOption",
    "RoundResult",
    # Voters
    "VoterRecord",
    "VoterWeight",
    "VoterAuthorization",
    "VoterStats",
    # Delegation
    "Delegation",
    "DelegatedWeight",
    # Ledger
    "LedgerAccount",
    "LedgerTransfer",
]
