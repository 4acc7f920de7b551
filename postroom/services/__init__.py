"""Business logic, independent of HTTP concerns. Services raise ``postroom.core.errors`` kinds."""

from .tokens import TokenManager
from .sessions import SessionIssuer

__all__ = ["TokenManager", "SessionIssuer"]
