"""Ownership verification against the remote verification service."""

from badge_insights.verification.retry import with_async_retries
from badge_insights.verification.verifier import OwnershipVerifier

__all__ = ["OwnershipVerifier", "with_async_retries"]
