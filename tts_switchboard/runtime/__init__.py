"""
Runtime module - Adapter lifecycle, the remote endpoint client, and the
router that decides between them.
"""

from tts_switchboard.runtime.cache import AdapterCache, CacheStats, call_adapter
from tts_switchboard.runtime.remote import RemoteClient
from tts_switchboard.runtime.router import ExecutionRouter

__all__ = [
    "AdapterCache",
    "CacheStats",
    "call_adapter",
    "RemoteClient",
    "ExecutionRouter",
]
