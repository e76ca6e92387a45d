from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import List, Optional

from rn_sync.fetcher import OrderBookClient
from rn_sync.ledger import LedgerError, open_ledger
from rn_sync.logging_config import setup_logging
from rn_sync.orchestrator import CycleReport, CycleStatus, OrderSync
from rn_sync.publisher import NostrPublisher
from rn_sync.relay_pool import RelayPool
from rn_sync.scheduler import IntervalScheduler
from rn_sync.settings import BridgeSettings, ConfigError, load_settings

EXIT_OK = 0
EXIT_CYCLE_FAILED = 1
EXIT_CONFIG = 2


class LedgerFatal(RuntimeError):
    pass


def build_sync(settings: BridgeSettings) -> tuple[OrderSync, list]:
    """Construct the long-lived resources and the orchestrator that uses them.

    Returns the orchestrator and the resources to close on shutdown.
    """
    client = OrderBookClient(settings.robosats_onion_url, proxy_url=settings.proxy_url)
    ledger = open_ledger(settings.database_url, table_name=settings.ledger_table)
    pool = RelayPool(settings.relays)
    publisher = NostrPublisher(pool, settings.nostr_privkey)
    sync = OrderSync(
        client,
        ledger,
        publisher,
        settings.robosats_referral_url,
        ledger_error_policy=settings.ledger_error_policy,
    )
    return sync, [client, ledger, pool]


def make_job(sync: OrderSync, exit_on_ledger_error: bool):
    def job() -> CycleReport:
        report = sync.run_cycle()
        if report.ledger_failed and exit_on_ledger_error:
            raise LedgerFatal(report.error or "ledger error")
        return report

    return job


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Announce new RoboSats orders on Nostr.")
    ap.add_argument("--config", default=None, help="YAML config file (default: ./config.yml)")
    ap.add_argument("--once", action="store_true", help="Run a single sync cycle and exit")
    ap.add_argument("--log-level", default=None, help="Override log_level from config")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    log_path = setup_logging(args.log_level or settings.log_level, component="bridge", base_dir=settings.log_dir)
    log = logging.getLogger("rn_sync.runner")
    log.info("Bridge logging to %s", log_path)
    log.info("Using nostr pubkey %s", settings.nostr_pubkey)
    log.info(
        "Bridge config relays=%d interval_s=%.0f ledger_table=%s ledger_error_policy=%s exit_on_ledger_error=%s",
        len(settings.relays),
        settings.sync_interval_s,
        settings.ledger_table,
        settings.ledger_error_policy,
        settings.exit_on_ledger_error,
    )

    try:
        sync, resources = build_sync(settings)
    except LedgerError as exc:
        log.error("Unable to open ledger: %s", exc)
        return EXIT_CYCLE_FAILED

    job = make_job(sync, settings.exit_on_ledger_error)
    try:
        if args.once:
            try:
                report = job()
            except LedgerFatal as exc:
                log.error("Exiting on ledger error: %s", exc)
                return EXIT_CYCLE_FAILED
            return EXIT_OK if report.status is CycleStatus.COMPLETED else EXIT_CYCLE_FAILED

        scheduler = IntervalScheduler(job, settings.sync_interval_s, run_on_start=settings.run_on_start)

        def _handle_signal(signum, _frame) -> None:
            log.info("Received signal %s; stopping after current cycle", signum)
            scheduler.stop()

        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
        try:
            scheduler.run_forever()
        except LedgerFatal as exc:
            log.error("Exiting on ledger error: %s", exc)
            return EXIT_CYCLE_FAILED
        return EXIT_OK
    finally:
        for res in resources:
            try:
                res.close()
            except Exception:
                log.exception("Error closing %s", type(res).__name__)


if __name__ == "__main__":
    raise SystemExit(main())
