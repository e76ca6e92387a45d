"""NIP-01 text note construction and BIP-340 signing."""

from __future__ import annotations

import hashlib
import json
import os
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from coincurve.keys import PrivateKey, PublicKeyXOnly

KIND_TEXT_NOTE = 1


def _secret_bytes(privkey_hex: str) -> bytes:
    try:
        secret = bytes.fromhex(privkey_hex.strip())
    except ValueError as exc:
        raise ValueError("nostr private key must be hex encoded") from exc
    if len(secret) != 32:
        raise ValueError(f"nostr private key must be 32 bytes (got {len(secret)})")
    return secret


def public_key_hex(privkey_hex: str) -> str:
    return PublicKeyXOnly.from_secret(_secret_bytes(privkey_hex)).format().hex()


def serialize_for_id(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: List[List[str]],
    content: str,
) -> bytes:
    payload = [0, pubkey, created_at, kind, tags, content]
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def compute_event_id(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: List[List[str]],
    content: str,
) -> str:
    return hashlib.sha256(serialize_for_id(pubkey, created_at, kind, tags, content)).hexdigest()


@dataclass(frozen=True)
class NostrEvent:
    id: str
    pubkey: str
    created_at: int
    kind: int
    content: str
    sig: str
    tags: List[List[str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": self.tags,
            "content": self.content,
            "sig": self.sig,
        }

    def verify(self) -> bool:
        expected = compute_event_id(self.pubkey, self.created_at, self.kind, self.tags, self.content)
        if expected != self.id:
            return False
        key = PublicKeyXOnly(bytes.fromhex(self.pubkey))
        return key.verify(bytes.fromhex(self.sig), bytes.fromhex(self.id))


def build_text_note(content: str, privkey_hex: str, created_at: Optional[int] = None) -> NostrEvent:
    """Build and sign a kind-1 note with no tags."""
    secret = _secret_bytes(privkey_hex)
    pubkey = PublicKeyXOnly.from_secret(secret).format().hex()
    ts = int(time.time()) if created_at is None else int(created_at)
    tags: List[List[str]] = []
    event_id = compute_event_id(pubkey, ts, KIND_TEXT_NOTE, tags, content)
    sig = PrivateKey(secret).sign_schnorr(bytes.fromhex(event_id), os.urandom(32))
    return NostrEvent(
        id=event_id,
        pubkey=pubkey,
        created_at=ts,
        kind=KIND_TEXT_NOTE,
        content=content,
        sig=sig.hex(),
        tags=tags,
    )
