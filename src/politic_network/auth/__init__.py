"""Authentication strategies for outgoing requests."""
from .base import AuthStrategy
from .bearer import BearerAuth

__all__ = ["AuthStrategy", "BearerAuth"]
