"""Tests for interview_relay.socket_registry -- socket lifecycle and per-socket state."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import WebSocketDisconnect
from hypothesis import given, settings
from hypothesis import strategies as st
from starlette.websockets import WebSocketState

from interview_relay.socket_registry import CodeSnapshot, SocketRegistry
from tests.conftest import make_ws_mock


class TestRegistration:

    def test_add_assigns_unique_ids(self, registry):
        a = registry.add(make_ws_mock())
        b = registry.add(make_ws_mock())
        assert a.socket_id != b.socket_id
        assert len(registry) == 2
        assert a.socket_id in registry

    def test_add_with_explicit_id(self, registry):
        entry = registry.add(make_ws_mock(), socket_id="abc")
        assert registry.get("abc") is entry

    def test_remove_returns_entry_and_marks_closed(self, registry):
        entry = registry.add(make_ws_mock())
        removed = registry.remove(entry.socket_id)
        assert removed is entry
        assert entry.alive is False
        assert entry.socket_id not in registry

    def test_remove_unknown_is_noop(self, registry):
        assert registry.remove("missing") is None


class TestPerSocketState:

    def test_snapshot_roundtrip(self, registry):
        sid = registry.add(make_ws_mock()).socket_id
        registry.set_snapshot(sid, CodeSnapshot("python", "arrays", "x = 1"))
        assert registry.get_snapshot(sid) == CodeSnapshot("python", "arrays", "x = 1")

    def test_close_discards_snapshot_and_payload(self, registry):
        sid = registry.add(make_ws_mock()).socket_id
        registry.set_snapshot(sid, CodeSnapshot("python", "arrays", "x = 1"))
        registry.set_last_review_payload(sid, "CODE_REVIEW_UPDATE language=python topic=arrays\nx = 1")

        registry.remove(sid)

        assert registry.get_snapshot(sid) is None
        assert registry.get_last_review_payload(sid) is None

    def test_writes_for_unknown_socket_are_ignored(self, registry):
        registry.set_snapshot("gone", CodeSnapshot("go", "maps"))
        registry.set_last_review_payload("gone", "payload")
        assert registry.get_snapshot("gone") is None
        assert "gone" not in registry

    def test_state_is_isolated_per_socket(self, registry):
        a = registry.add(make_ws_mock()).socket_id
        b = registry.add(make_ws_mock()).socket_id
        registry.set_snapshot(a, CodeSnapshot("python", "arrays", "a"))
        assert registry.get_snapshot(b) is None

    @settings(max_examples=50)
    @given(ops=st.lists(st.tuples(st.sampled_from(["add", "remove", "snap"]), st.integers(0, 4)), max_size=40))
    def test_removed_sockets_never_keep_state(self, ops):
        """After any add/remove/write sequence, only live sockets hold state."""
        registry = SocketRegistry()
        for op, n in ops:
            sid = f"s{n}"
            if op == "add" and sid not in registry:
                registry.add(MagicMock(), socket_id=sid)
            elif op == "remove":
                registry.remove(sid)
            else:
                registry.set_snapshot(sid, CodeSnapshot("py", "t", sid))
                registry.set_last_review_payload(sid, sid)
        for n in range(5):
            sid = f"s{n}"
            if sid not in registry:
                assert registry.get_snapshot(sid) is None
                assert registry.get_last_review_payload(sid) is None


class TestSafeSend:

    @pytest.mark.asyncio
    async def test_send_to_open_socket(self, registry):
        ws = make_ws_mock()
        entry = registry.add(ws)
        assert await entry.safe_send({"type": "textStream", "data": "hi"}) is True
        ws.send_json.assert_awaited_once_with({"type": "textStream", "data": "hi"})

    @pytest.mark.asyncio
    async def test_send_failure_marks_socket_closed(self, registry):
        ws = make_ws_mock()
        ws.send_json = AsyncMock(side_effect=WebSocketDisconnect())
        entry = registry.add(ws)

        assert await entry.safe_send({"type": "textStream", "data": "hi"}) is False
        assert entry.alive is False
        assert registry.open_sockets() == []

    @pytest.mark.asyncio
    async def test_disconnected_state_skips_send(self, registry):
        ws = make_ws_mock()
        ws.client_state = WebSocketState.DISCONNECTED
        entry = registry.add(ws)

        assert await entry.safe_send({"type": "textStream", "data": "hi"}) is False
        ws.send_json.assert_not_awaited()
