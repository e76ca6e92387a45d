from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol

from rn_core.announcement import format_announcement
from rn_core.types import Order
from rn_sync.fetcher import FetchError
from rn_sync.ledger import LedgerError
from rn_sync.publisher import PublishReceipt


class OrderSource(Protocol):
    def fetch(self) -> List[Order]: ...


class Ledger(Protocol):
    def has(self, order_id: int) -> bool: ...

    def insert(self, order_id: int) -> bool: ...


class Publisher(Protocol):
    def publish(self, content: str) -> PublishReceipt: ...


class OrderOutcome(str, Enum):
    INSERTED = "inserted"
    ALREADY_SEEN = "already_seen"
    FAILED = "failed"


class CycleStatus(str, Enum):
    COMPLETED = "completed"
    ABORTED = "aborted"


class LedgerErrorPolicy(str, Enum):
    ABORT = "abort"
    SKIP = "skip"


@dataclass(frozen=True)
class OrderResult:
    order_id: int
    outcome: OrderOutcome
    event_id: Optional[str] = None
    published: bool = False
    error: Optional[str] = None


@dataclass
class CycleReport:
    status: CycleStatus = CycleStatus.COMPLETED
    fetched: int = 0
    results: List[OrderResult] = field(default_factory=list)
    error: Optional[str] = None
    ledger_failed: bool = False
    duration_s: float = 0.0

    @property
    def new_ids(self) -> List[int]:
        return [r.order_id for r in self.results if r.outcome is OrderOutcome.INSERTED]

    @property
    def published_ids(self) -> List[int]:
        return [r.order_id for r in self.results if r.published]

    @property
    def failed_ids(self) -> List[int]:
        return [r.order_id for r in self.results if r.outcome is OrderOutcome.FAILED]

    @property
    def seen_ids(self) -> List[int]:
        return [r.order_id for r in self.results if r.outcome is OrderOutcome.ALREADY_SEEN]


class OrderSync:
    """One fetch -> dedup -> persist -> publish pass over the order book.

    The ledger is the only record of what has been handled: an order is
    inserted before it is announced and is never announced again, even if
    publishing fails.
    """

    def __init__(
        self,
        source: OrderSource,
        ledger: Ledger,
        publisher: Publisher,
        referral_url: str,
        ledger_error_policy: LedgerErrorPolicy | str = LedgerErrorPolicy.ABORT,
    ) -> None:
        self.source = source
        self.ledger = ledger
        self.publisher = publisher
        self.referral_url = referral_url
        self.ledger_error_policy = LedgerErrorPolicy(ledger_error_policy)
        self._log = logging.getLogger("rn_sync.orchestrator")

    def _announce(self, order: Order) -> OrderResult:
        content = format_announcement(order, self.referral_url)
        try:
            receipt = self.publisher.publish(content)
        except Exception as exc:
            self._log.error("Publishing order id %d failed: %s", order.id, exc)
            return OrderResult(order.id, OrderOutcome.INSERTED, error=f"publish: {exc}")
        self._log.info(
            "Sent event %s for order id %d (%d/%d relays accepted)",
            receipt.event_id,
            order.id,
            receipt.accepted_count,
            len(receipt.acks),
        )
        return OrderResult(order.id, OrderOutcome.INSERTED, event_id=receipt.event_id, published=True)

    def process_order(self, order: Order) -> OrderResult:
        """Handle one order. Raises LedgerError; publish errors are captured."""
        if self.ledger.has(order.id):
            return OrderResult(order.id, OrderOutcome.ALREADY_SEEN)
        if not self.ledger.insert(order.id):
            return OrderResult(order.id, OrderOutcome.ALREADY_SEEN)
        return self._announce(order)

    def run_cycle(self) -> CycleReport:
        report = CycleReport()
        t0 = time.monotonic()
        try:
            orders = self.source.fetch()
        except FetchError as exc:
            self._log.error("Fetch failed, cycle aborted: %s", exc)
            report.status = CycleStatus.ABORTED
            report.error = str(exc)
            report.duration_s = time.monotonic() - t0
            return report

        report.fetched = len(orders)
        for order in orders:
            try:
                result = self.process_order(order)
            except LedgerError as exc:
                report.ledger_failed = True
                report.results.append(OrderResult(order.id, OrderOutcome.FAILED, error=str(exc)))
                if self.ledger_error_policy is LedgerErrorPolicy.ABORT:
                    self._log.error("Ledger error on order id %d, cycle aborted: %s", order.id, exc)
                    report.status = CycleStatus.ABORTED
                    report.error = str(exc)
                    break
                self._log.error("Ledger error on order id %d, skipping order: %s", order.id, exc)
                continue
            report.results.append(result)

        report.duration_s = time.monotonic() - t0
        self._log.info(
            "Cycle %s fetched=%d new=%d published=%d failed=%d duration_s=%.2f",
            report.status.value,
            report.fetched,
            len(report.new_ids),
            len(report.published_ids),
            len(report.failed_ids),
            report.duration_s,
        )
        return report
