"""Domain errors shared by services and request handlers."""
from __future__ import annotations


class ContactNotFoundError(Exception):
    """Raised when a contact does not exist or belongs to another owner."""

    def __init__(self, contact_id: int) -> None:
        super().__init__(f"Contact {contact_id} not found")
        self.contact_id = contact_id


class PersistenceError(Exception):
    """Raised when a write could not be applied.

    ``operation`` is a short verb phrase ("save summary", "add note") used
    verbatim in the message returned to the user.
    """

    def __init__(self, operation: str) -> None:
        super().__init__(f"Failed to {operation}")
        self.operation = operation
