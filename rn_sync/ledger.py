from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import BigInteger, Column, MetaData, Table, create_engine, func, insert, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from rn_sync import settings as settings_mod


class LedgerError(RuntimeError):
    pass


def create_ledger_engine(url: str) -> Engine:
    """Engine with a bounded pool and a maximum connection lifetime.

    Connections sit idle for most of a sync interval, so they are recycled
    and pinged before use.
    """
    backend = make_url(url).get_backend_name()
    if backend == "sqlite":
        # In-memory databases only exist on a single shared connection.
        return create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    connect_args = {}
    if backend == "mysql":
        connect_args = {
            "connect_timeout": settings_mod.DB_TIMEOUT_S,
            "read_timeout": settings_mod.DB_TIMEOUT_S,
            "write_timeout": settings_mod.DB_TIMEOUT_S,
        }
    return create_engine(
        url,
        pool_size=settings_mod.DB_POOL_SIZE,
        max_overflow=0,
        pool_recycle=settings_mod.DB_POOL_RECYCLE_S,
        pool_pre_ping=True,
        pool_timeout=settings_mod.DB_TIMEOUT_S,
        connect_args=connect_args,
    )


class SeenOrderLedger:
    """Append-only set of order ids that have already been handled."""

    def __init__(self, engine: Engine, table_name: str = "orders") -> None:
        self.engine = engine
        self.table = Table(
            table_name,
            MetaData(),
            Column("orderId", BigInteger, primary_key=True, autoincrement=False),
        )
        self._col = self.table.c.orderId
        self._log = logging.getLogger("rn_sync.ledger")

    @classmethod
    def from_url(cls, url: str, table_name: str = "orders") -> "SeenOrderLedger":
        return cls(create_ledger_engine(url), table_name=table_name)

    def ensure_table(self) -> None:
        try:
            self.table.metadata.create_all(self.engine, checkfirst=True)
        except SQLAlchemyError as exc:
            raise LedgerError(f"Unable to create ledger table {self.table.name!r}: {exc}") from exc

    def has(self, order_id: int) -> bool:
        stmt = select(self._col).where(self._col == order_id).limit(1)
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).first()
        except SQLAlchemyError as exc:
            raise LedgerError(f"Ledger lookup failed for order id {order_id}: {exc}") from exc
        return row is not None

    def insert(self, order_id: int) -> bool:
        """Record ``order_id``. Returns False if it was already present."""
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(self.table).values(orderId=order_id))
        except IntegrityError:
            self._log.warning("Order id %d already in ledger; insert ignored", order_id)
            return False
        except SQLAlchemyError as exc:
            raise LedgerError(f"Ledger insert failed for order id {order_id}: {exc}") from exc
        self._log.info("Order added to ledger: %d", order_id)
        return True

    def count(self) -> int:
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(select(func.count()).select_from(self.table)).scalar_one())
        except SQLAlchemyError as exc:
            raise LedgerError(f"Ledger count failed: {exc}") from exc

    def close(self) -> None:
        self.engine.dispose()


def open_ledger(url: str, table_name: Optional[str] = None) -> SeenOrderLedger:
    ledger = SeenOrderLedger.from_url(url, table_name=table_name or "orders")
    ledger.ensure_table()
    return ledger
