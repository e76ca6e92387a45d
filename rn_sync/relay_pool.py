from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from websockets.exceptions import ConnectionClosed, WebSocketException  # type: ignore
from websockets.sync.client import connect as ws_connect  # type: ignore

from rn_sync import settings as settings_mod


@dataclass(frozen=True)
class RelayAck:
    relay: str
    accepted: bool
    message: str = ""


class RelayPool:
    """Persistent websocket connections to a fixed set of Nostr relays.

    Connections are opened on first use and kept across sync cycles. A
    connection found closed when sending is reopened once.
    """

    def __init__(
        self,
        relays: Sequence[str],
        open_timeout_s: Optional[float] = None,
        ack_timeout_s: Optional[float] = None,
        connect: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.relays = list(relays)
        self.open_timeout_s = settings_mod.RELAY_OPEN_TIMEOUT_S if open_timeout_s is None else float(open_timeout_s)
        self.ack_timeout_s = settings_mod.RELAY_ACK_TIMEOUT_S if ack_timeout_s is None else float(ack_timeout_s)
        self._connect = connect or ws_connect
        self._conns: Dict[str, Any] = {}
        self._log = logging.getLogger("rn_sync.relay_pool")

    def _open(self, relay: str) -> Any:
        conn = self._connect(relay, open_timeout=self.open_timeout_s, close_timeout=5)
        self._conns[relay] = conn
        self._log.info("Connected to relay %s", relay)
        return conn

    def _drop(self, relay: str) -> None:
        conn = self._conns.pop(relay, None)
        if conn is None:
            return
        try:
            conn.close()
        except Exception:
            self._log.debug("Error closing relay %s", relay, exc_info=True)

    def _send(self, relay: str, frame: str) -> Any:
        conn = self._conns.get(relay)
        if conn is not None:
            try:
                conn.send(frame)
                return conn
            except ConnectionClosed:
                self._log.info("Relay %s connection was closed; reconnecting", relay)
                self._drop(relay)
        conn = self._open(relay)
        conn.send(frame)
        return conn

    def _await_ok(self, relay: str, conn: Any, event_id: str) -> RelayAck:
        deadline = time.monotonic() + self.ack_timeout_s
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return RelayAck(relay, False, "no OK before timeout")
            try:
                raw = conn.recv(timeout=remaining)
            except TimeoutError:
                return RelayAck(relay, False, "no OK before timeout")
            try:
                msg = json.loads(raw)
            except ValueError:
                continue
            if not isinstance(msg, list) or not msg:
                continue
            if msg[0] == "OK" and len(msg) >= 3 and msg[1] == event_id:
                return RelayAck(relay, bool(msg[2]), str(msg[3]) if len(msg) > 3 else "")
            if msg[0] == "NOTICE" and len(msg) > 1:
                self._log.info("Relay %s notice: %s", relay, msg[1])

    def publish(self, event: Dict[str, Any]) -> List[RelayAck]:
        """Send one signed event to every relay; failures are reported, not raised."""
        frame = json.dumps(["EVENT", event], ensure_ascii=False)
        acks: List[RelayAck] = []
        for relay in self.relays:
            try:
                conn = self._send(relay, frame)
                ack = self._await_ok(relay, conn, event["id"])
            except (OSError, TimeoutError, WebSocketException) as exc:
                self._drop(relay)
                ack = RelayAck(relay, False, f"{type(exc).__name__}: {exc}")
            if not ack.accepted:
                self._log.warning("Relay %s did not accept event %s: %s", relay, event["id"], ack.message)
            acks.append(ack)
        return acks

    def close(self) -> None:
        for relay in list(self._conns):
            self._drop(relay)
