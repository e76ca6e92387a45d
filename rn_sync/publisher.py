from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from rn_core.events import NostrEvent, build_text_note
from rn_sync.relay_pool import RelayAck, RelayPool


class PublishError(RuntimeError):
    pass


@dataclass(frozen=True)
class PublishReceipt:
    event_id: str
    acks: List[RelayAck] = field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return sum(1 for a in self.acks if a.accepted)


class NostrPublisher:
    """Signs announcements as text notes and broadcasts them through a relay pool.

    Every call produces a new event; callers are responsible for calling it
    at most once per order.
    """

    def __init__(self, pool: RelayPool, privkey_hex: str) -> None:
        self.pool = pool
        self._privkey = privkey_hex
        self._log = logging.getLogger("rn_sync.publisher")

    def sign(self, content: str, created_at: Optional[int] = None) -> NostrEvent:
        try:
            return build_text_note(content, self._privkey, created_at=created_at)
        except Exception as exc:
            raise PublishError(f"Unable to build nostr event: {exc}") from exc

    def publish(self, content: str) -> PublishReceipt:
        event = self.sign(content)
        acks = self.pool.publish(event.to_dict())
        receipt = PublishReceipt(event_id=event.id, acks=acks)
        if acks and receipt.accepted_count == 0:
            self._log.warning("Event %s was not accepted by any relay", event.id)
        return receipt
