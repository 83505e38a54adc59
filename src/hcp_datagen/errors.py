"""
Exception types raised by the generation pipeline.

Validation failures are not exceptions: validators return (passed, message)
tuples and the CLI turns a failed run into a non-zero exit code.
"""


class HCPDataGenError(Exception):
    """Base class for all generator errors."""

    pass


class ConfigurationError(HCPDataGenError, ValueError):
    """Raised when run parameters are rejected before generation starts."""

    pass


class GenerationExhaustedError(HCPDataGenError):
    """Raised when a bounded retry loop runs out of attempts."""

    def __init__(self, what: str, attempts: int):
        self.what = what
        self.attempts = attempts
        super().__init__(f"Gave up generating {what} after {attempts} attempts")


class ConsistencyError(HCPDataGenError):
    """Raised when a stage references an entity the prior stage never produced."""

    pass


class PersistenceError(HCPDataGenError):
    """Raised when the backing store rejects a read or write."""

    pass
