"""Errors raised by the scoring core and its services."""


class PerimeterError(Exception):
    """Base class for all Perimeter errors."""
    pass


class ScoringError(PerimeterError):
    """Raised when a claim/outcome pair cannot be scored.

    Always a caller error: the input is malformed and retrying it unchanged
    cannot succeed.
    """
    pass


class MissingPredictionError(ScoringError):
    """Raised when a claim has no predicted field set."""
    pass


class MissingActualError(ScoringError):
    """Raised when an outcome has no actual field set."""
    pass


class TypeMismatchError(ScoringError):
    """Raised when the claim type has no matching predicted/actual pair."""
    pass


class UnsupportedClaimTypeError(ScoringError):
    """Raised for a claim type outside the known encodings."""
    pass


class ClaimNotFoundError(PerimeterError):
    """Raised when a claim id does not exist in storage."""
    pass


class ForecasterNotFoundError(PerimeterError):
    """Raised when a forecaster id does not exist in storage."""
    pass


class OutcomeConflictError(PerimeterError):
    """Raised when a claim already has an outcome."""

    def __init__(self, claim_id: str):
        super().__init__(f"Claim {claim_id} is already resolved")
        self.claim_id = claim_id
