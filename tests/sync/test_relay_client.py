from __future__ import annotations

import asyncio
import json

import ws_clients
import ws_clients.relay_client as client_mod


class FakeWS:
    def __init__(self, messages):
        self.sent = []
        self._messages = list(messages)

    async def send(self, payload: str) -> None:
        self.sent.append(json.loads(payload))

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._messages:
            raise StopAsyncIteration
        return self._messages.pop(0)


class FakeConnect:
    def __init__(self, ws: FakeWS):
        self._ws = ws

    async def __aenter__(self):
        return self._ws

    async def __aexit__(self, exc_type, exc, tb):
        return False


def test_relay_client_subscribes_and_prints_notes(monkeypatch, capsys) -> None:
    ws = FakeWS(
        [
            json.dumps(["EVENT", "sub", {"id": "e1", "created_at": 5, "content": "Type: BUY"}]),
            json.dumps(["EOSE", "sub"]),
            "not json",
        ]
    )
    urls = []

    def fake_connect(url, **_kwargs):
        urls.append(url)
        return FakeConnect(ws)

    monkeypatch.setattr(client_mod.websockets, "connect", fake_connect)
    monkeypatch.setenv("RELAY_URL", "wss://relay.test")
    monkeypatch.setenv("AUTHOR", "ab" * 32)
    monkeypatch.setenv("LIMIT", "3")

    asyncio.run(client_mod.main())

    assert urls == ["wss://relay.test"]
    req = ws.sent[0]
    assert req[0] == "REQ"
    assert req[2] == {"authors": ["ab" * 32], "kinds": [1], "limit": 3}
    out = capsys.readouterr().out
    assert "Type: BUY" in out
    assert '["EOSE", "sub"]' in out
    assert "not json" in out


def test_debug_clients_are_a_script_directory_not_a_package() -> None:
    # No __init__.py: importable from a checkout, never shipped in the wheel.
    assert getattr(ws_clients, "__file__", None) is None
    assert len(list(ws_clients.__path__)) >= 1
