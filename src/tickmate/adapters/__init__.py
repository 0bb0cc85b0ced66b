"""Adapters - I/O implementations of ports."""

from .ticktick_api import TickTickAdapter, AuthenticationError, TickTickAPIError

__all__ = [
    "TickTickAdapter",
    "AuthenticationError",
    "TickTickAPIError",
]
