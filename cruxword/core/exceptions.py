"""Custom exception hierarchy for the fill engine."""


class CruxwordError(Exception):
    """Base exception for engine failures."""


class DataLoadError(CruxwordError):
    """Raised when an input table cannot be read at all."""


class PlacementError(CruxwordError):
    """Raised when a piece or chain cannot be written to the board."""


class InvariantViolation(CruxwordError):
    """Raised when a caller breaks a structural contract (bad lengths, negative counts)."""
