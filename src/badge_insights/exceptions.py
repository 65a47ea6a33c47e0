"""Badge Insights exception hierarchy."""

from __future__ import annotations


class InsightsError(Exception):
    """Base exception for all Badge Insights errors."""


class MethodNotFoundError(InsightsError):
    """Raised when a custom RPC request names a method the snap does not handle.

    Attributes:
        method: The unrecognized method name.
    """

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__("Method not found.")


class InvalidParamsError(InsightsError):
    """Raised when custom RPC params fail validation at the boundary."""


class StoreUnavailableError(InsightsError):
    """Raised when the persistent state store cannot be read or written."""


class VerificationError(InsightsError):
    """Raised when a single ownership verification call cannot produce a verdict.

    Attributes:
        address: The address being verified.
        label: Label of the rule being evaluated.
    """

    def __init__(self, address: str, label: str, reason: str) -> None:
        self.address = address
        self.label = label
        super().__init__(f"Verification of {address} against '{label}' failed: {reason}")
