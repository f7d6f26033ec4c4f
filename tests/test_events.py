"""Tests for the event emitter."""
from unittest.mock import AsyncMock, Mock

import pytest

from dropzone.utils.events import EventEmitter


@pytest.mark.asyncio
async def test_emits_to_sync_and_async_listeners():
    emitter = EventEmitter()
    sync_listener = Mock()
    async_listener = AsyncMock()
    emitter.on("state", sync_listener)
    emitter.on("state", async_listener)

    await emitter.emit("state", "a", step=1)

    sync_listener.assert_called_once_with("a", step=1)
    async_listener.assert_awaited_once_with("a", step=1)


@pytest.mark.asyncio
async def test_off_and_duplicate_subscription():
    emitter = EventEmitter()
    listener = Mock()
    emitter.on("state", listener)
    emitter.on("state", listener)

    await emitter.emit("state")
    emitter.off("state", listener)
    await emitter.emit("state")

    listener.assert_called_once()
    assert emitter.has_listeners("state") is False


@pytest.mark.asyncio
async def test_listener_errors_are_logged(caplog):
    emitter = EventEmitter()
    emitter.on("state", Mock(side_effect=ValueError("boom")))
    after = Mock()
    emitter.on("state", after)

    await emitter.emit("state")

    after.assert_called_once()
    assert "boom" in caplog.text
