from __future__ import annotations

import concurrent.futures
import json
import logging
import threading
from typing import List, Optional

import requests

from rn_core.types import Order
from rn_sync import settings as settings_mod

READ_CHUNK_BYTES = 16 * 1024


class FetchError(RuntimeError):
    pass


def parse_order_book(body: str) -> List[Order]:
    """Decode the book response into orders; any bad element rejects the whole batch."""
    try:
        payload = json.loads(body)
    except (ValueError, OverflowError, RecursionError) as exc:
        raise FetchError(f"Order book is not valid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise FetchError(f"Order book must be a JSON array (got {type(payload).__name__})")
    try:
        return [Order.from_dict(item) for item in payload]
    except (ValueError, OverflowError, RecursionError) as exc:
        raise FetchError(f"Invalid order in book: {exc}") from exc


class OrderBookClient:
    """GETs the public order book through the Tor proxy.

    The session is created once and reused for every cycle. ``timeout_s``
    bounds the whole request (connect, headers and body), not each socket
    read: the request runs on a single worker thread and the caller stops
    waiting at the deadline. A request abandoned that way finishes in the
    background and the next fetch queues behind it within its own deadline.
    """

    def __init__(
        self,
        base_url: str,
        proxy_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = settings_mod.FETCH_TIMEOUT_S if timeout_s is None else float(timeout_s)
        self.session = session or requests.Session()
        # Per-request proxies win over HTTP(S)_PROXY from the environment.
        self.proxies = {"http": proxy_url, "https": proxy_url} if proxy_url else None
        self._pool = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="rn-fetch")
        self._log = logging.getLogger("rn_sync.fetcher")

    @property
    def url(self) -> str:
        return f"{self.base_url}{settings_mod.ORDER_BOOK_QUERY}"

    def _get_body(self, abandoned: threading.Event) -> str:
        resp = self.session.get(self.url, proxies=self.proxies, timeout=self.timeout_s, stream=True)
        try:
            resp.raise_for_status()
            chunks = []
            for chunk in resp.iter_content(chunk_size=READ_CHUNK_BYTES):
                if abandoned.is_set():
                    raise FetchError("Order book read abandoned")
                chunks.append(chunk)
            return b"".join(chunks).decode(resp.encoding or "utf-8", errors="replace")
        finally:
            resp.close()

    def fetch(self) -> List[Order]:
        self._log.info("Fetching orders from %s", self.url)
        abandoned = threading.Event()
        future = self._pool.submit(self._get_body, abandoned)
        try:
            body = future.result(timeout=self.timeout_s)
        except concurrent.futures.TimeoutError as exc:
            abandoned.set()
            future.cancel()
            raise FetchError(f"Order book request exceeded {self.timeout_s:g}s deadline") from exc
        except requests.RequestException as exc:
            raise FetchError(f"Order book request failed: {exc}") from exc

        self._log.debug("Got body: %s", body)
        orders = parse_order_book(body)
        self._log.info("Found %d orders", len(orders))
        return orders

    def close(self) -> None:
        self._pool.shutdown(wait=False, cancel_futures=True)
        self.session.close()
