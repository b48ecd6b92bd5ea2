"""
Message Dispatcher Port - Abstract interface for the outbound mail sink.

Hexagonal Architecture: the notification batch composes DigestMessage values
and hands them to a dispatcher. Delivery is asynchronous; dispatch() returning
means the message was accepted, not that it was delivered.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Dict


class DispatchError(Exception):
    """Raised when a message cannot be handed to the mail sink."""
    pass


@dataclass
class DigestMessage:
    """
    One consolidated expiry reminder for one user.

    Attributes:
        user_id: Recipient user id (string form, queue-safe)
        recipient_email: Destination address
        recipient_name: Name used in the greeting
        subject: Mail subject
        body: Plain-text mail body
        expiring_soon_count: Number of documents listed as expiring soon
        expired_count: Number of documents listed as expired
    """
    user_id: str
    recipient_email: str
    recipient_name: str
    subject: str
    body: str
    expiring_soon_count: int
    expired_count: int

    def to_payload(self) -> Dict[str, Any]:
        """JSON-serialisable form for the task queue"""
        return asdict(self)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "DigestMessage":
        return cls(**payload)


class MessageDispatcherPort(ABC):
    """Port interface for handing composed messages to the mail sink."""

    @abstractmethod
    def dispatch(self, message: DigestMessage) -> None:
        """Queue a message for delivery.

        Raises:
            DispatchError: If the message could not be queued
        """
        pass
