"""
Testing Utilities

Components:
    AdapterMock        - Recording adapter with failure injection
    FakeRemoteClient   - Remote endpoint stand-in that counts calls
    create_test_switchboard - Switchboard wired with the above

Usage:
    from tts_switchboard.testing import AdapterMock, create_test_switchboard

    board = create_test_switchboard(engines=["mock"])
    result = asyncio.run(board.synthesize("Hi", voice, mode="browser"))
"""

from tts_switchboard.testing.mock import (
    AdapterMock,
    MockConfig,
    CallRecord,
    FakeRemoteClient,
    remote_failure,
)

from tts_switchboard.testing.fixtures import (
    create_test_credentials,
    create_test_switchboard,
    SAMPLE_TEXTS,
)

__all__ = [
    # Mock
    "AdapterMock",
    "MockConfig",
    "CallRecord",
    "FakeRemoteClient",
    "remote_failure",
    # Fixtures
    "create_test_credentials",
    "create_test_switchboard",
    "SAMPLE_TEXTS",
]
