from __future__ import annotations

import pytest

from rn_core.events import NostrEvent, public_key_hex
from rn_sync.publisher import NostrPublisher, PublishError
from rn_sync.relay_pool import RelayAck

PRIVKEY = "7f7ff03d123792d6ac594bfa67bf6d0c0ab55b6b1fdb6249303fe861f1ccba9a"


class FakePool:
    def __init__(self, accepted=(True,)):
        self.accepted = accepted
        self.events = []

    def publish(self, event):
        self.events.append(event)
        return [RelayAck(f"wss://r{i}", ok) for i, ok in enumerate(self.accepted)]


def test_publish_signs_and_returns_event_id() -> None:
    pool = FakePool(accepted=(True, False))
    receipt = NostrPublisher(pool, PRIVKEY).publish("Type: BUY")

    sent = pool.events[0]
    assert receipt.event_id == sent["id"]
    assert receipt.accepted_count == 1
    assert sent["pubkey"] == public_key_hex(PRIVKEY)
    assert sent["kind"] == 1
    assert sent["tags"] == []
    assert NostrEvent(**sent).verify()


def test_no_relay_accepting_is_not_an_error() -> None:
    receipt = NostrPublisher(FakePool(accepted=(False, False)), PRIVKEY).publish("x")
    assert receipt.accepted_count == 0
    assert len(receipt.event_id) == 64


def test_every_call_broadcasts_again() -> None:
    pool = FakePool()
    pub = NostrPublisher(pool, PRIVKEY)
    pub.publish("same")
    pub.publish("same")
    assert len(pool.events) == 2


def test_bad_key_is_publish_error() -> None:
    pool = FakePool()
    with pytest.raises(PublishError):
        NostrPublisher(pool, "zz").publish("x")
    assert pool.events == []
