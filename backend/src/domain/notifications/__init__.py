"""Notifications domain layer - digest composition and the mail sink port"""

from .ports import DigestMessage, DispatchError, MessageDispatcherPort
from .digest import ExpiryDigest, compose_expiry_digest, render_body

__all__ = [
    "DigestMessage",
    "DispatchError",
    "MessageDispatcherPort",
    "ExpiryDigest",
    "compose_expiry_digest",
    "render_body",
]
