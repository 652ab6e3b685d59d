"""
Error taxonomy for the voting core.

Every precondition failure raises one of these before any write happens, so
the caller's transaction is left exactly as it was. The API layer renders
them with ``status_code`` and ``code``; nothing here is retried.
"""
from fastapi import status


class VotingError(Exception):
    """Base class for all voting core failures."""
    code: str = "voting_error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Voting operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(VotingError):
    code = "unauthorized"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Caller is not allowed to perform this operation"


class NotFound(VotingError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Record not found"


class VotingEnded(VotingError):
    code = "voting_ended"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Voting has ended for this session"


class SessionNotActive(VotingError):
    code = "session_not_active"
    status_code = status.HTTP_409_CONFLICT
    default_message = "No voting session is open"


class SessionActive(VotingError):
    code = "session_active"
    status_code = status.HTTP_409_CONFLICT
    default_message = "A voting session is still open"


class AlreadyVoted(VotingError):
    code = "already_voted"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Voter has already voted in this round"


class AlreadyFinalized(VotingError):
    code = "already_finalized"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Session results are already finalized"


class InvalidOption(VotingError):
    code = "invalid_option"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Option does not exist or is inactive"


class InvalidConfig(VotingError):
    code = "invalid_config"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Invalid session configuration"


class QuorumNotMet(VotingError):
    code = "quorum_not_met"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Quorum has not been met"


class DelegationNotAllowed(VotingError):
    code = "delegation_not_allowed"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Delegation is not allowed"


class SelfDelegation(VotingError):
    code = "self_delegation"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Cannot delegate to yourself"


class Ineligible(VotingError):
    code = "ineligible"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Delegate is not eligible to vote"


class CapacityExceeded(VotingError):
    code = "capacity_exceeded"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Capacity exceeded"


class InsufficientBalance(VotingError):
    code = "insufficient_balance"
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_message = "Insufficient balance"
