# qjob_tracker/sessions/__init__.py
"""
Realtime session management.

Keeps track of which user each open realtime connection has authenticated as.
"""

from .session_data import RealtimeSession
from .registry import (
    AbstractSessionRegistry,
    InMemorySessionRegistry,
    RedisSessionRegistry,
    create_session_registry
)
from .realtime import realtime_router, get_session_registry

__all__ = [
    "RealtimeSession",
    "AbstractSessionRegistry",
    "InMemorySessionRegistry",
    "RedisSessionRegistry",
    "create_session_registry",
    "realtime_router",
    "get_session_registry",
]
