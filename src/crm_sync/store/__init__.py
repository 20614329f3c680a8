"""Local storage for dead-lettered payloads and outcome events."""

from crm_sync.store.deadletter_store import DeadLetter, DeadLetterStore

__all__ = ["DeadLetter", "DeadLetterStore"]
