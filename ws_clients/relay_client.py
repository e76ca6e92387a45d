from __future__ import annotations

import asyncio
import json
import os
import uuid
from typing import Optional

import websockets


def _env(name: str, default: Optional[str] = None) -> str:
    value = os.getenv(name, default)
    if value is None:
        raise RuntimeError(f"Missing env var: {name}")
    return value


async def main() -> None:
    url = _env("RELAY_URL", "wss://relay.damus.io")
    author = _env("AUTHOR")
    limit = int(os.getenv("LIMIT", "10"))

    sub_id = uuid.uuid4().hex[:16]
    req = ["REQ", sub_id, {"authors": [author], "kinds": [1], "limit": limit}]
    print(f"Connecting to {url}")
    async with websockets.connect(url) as ws:
        print("Connected.")
        await ws.send(json.dumps(req))
        async for message in ws:
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                print(message)
                continue
            if isinstance(payload, list) and payload[:1] == ["EVENT"] and len(payload) >= 3:
                event = payload[2]
                print(f"--- {event.get('id')} created_at={event.get('created_at')}")
                print(event.get("content", ""))
            else:
                print(json.dumps(payload, ensure_ascii=False))


if __name__ == "__main__":
    asyncio.run(main())
