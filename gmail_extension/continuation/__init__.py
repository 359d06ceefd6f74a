"""Suspended requests and the retry flow built on them."""

from gmail_extension.continuation.models import ContinuationRecord
from gmail_extension.continuation.responder import RetryDecisionResponder
from gmail_extension.continuation.store import ContinuationStore, continuation_store

__all__ = [
    "ContinuationRecord",
    "ContinuationStore",
    "continuation_store",
    "RetryDecisionResponder",
]
