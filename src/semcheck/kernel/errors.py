"""Error taxonomy for the comparison kernel."""


class SemcheckError(Exception):
    """Base exception for semcheck errors."""
    pass


class InvalidInputError(SemcheckError, ValueError):
    """Raised when an API tree is malformed. Aborts before any comparison."""
    pass


class TreeLimitExceeded(InvalidInputError):
    """Raised when a tree is deeper or larger than the configured guard allows."""
    def __init__(self, limit: str, value: int, maximum: int):
        self.limit = limit
        self.value = value
        self.maximum = maximum
        super().__init__(f"API tree exceeds {limit}: {value} > {maximum}")


class CycleDetectedError(InvalidInputError):
    """Raised when flat item records form a parent cycle."""
    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        cycle_str = " -> ".join(cycle + cycle[:1])
        super().__init__(f"Cycle detected in item parents:\n  Cycle: {cycle_str}")


class ConfigError(SemcheckError, ValueError):
    """Raised for unparsable version strings or invalid comparison settings."""
    pass


class InternalInvariantViolation(SemcheckError):
    """Raised by the classifier for a change kind it has no rule for.

    This is a defect in the comparator, not a runtime condition. The engine
    reports it and falls back to Breaking instead of aborting.
    """
    def __init__(self, kind: object):
        self.kind = kind
        super().__init__(f"No classification rule for change kind: {kind!r}")
