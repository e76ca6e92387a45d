from __future__ import annotations

import dataclasses
import hashlib
import json

import pytest

from rn_core.events import KIND_TEXT_NOTE, build_text_note, compute_event_id, public_key_hex, serialize_for_id

PRIVKEY = "7f7ff03d123792d6ac594bfa67bf6d0c0ab55b6b1fdb6249303fe861f1ccba9a"


def test_text_note_is_signed_and_verifiable() -> None:
    event = build_text_note("Type: BUY", PRIVKEY, created_at=1_700_000_000)
    assert event.kind == KIND_TEXT_NOTE
    assert event.tags == []
    assert event.created_at == 1_700_000_000
    assert event.pubkey == public_key_hex(PRIVKEY)
    assert len(event.id) == 64
    assert len(event.sig) == 128
    assert event.verify()


def test_event_id_is_sha256_of_compact_serialization() -> None:
    event = build_text_note("Payment method: Bizum €", PRIVKEY, created_at=1)
    expected_bytes = json.dumps(
        [0, event.pubkey, 1, 1, [], "Payment method: Bizum €"],
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")
    assert serialize_for_id(event.pubkey, 1, 1, [], event.content) == expected_bytes
    assert event.id == hashlib.sha256(expected_bytes).hexdigest()
    assert event.id == compute_event_id(event.pubkey, 1, 1, [], event.content)
    assert "€".encode("utf-8") in expected_bytes


def test_tampered_content_fails_verification() -> None:
    event = build_text_note("Price: 100", PRIVKEY, created_at=5)
    forged = dataclasses.replace(event, content="Price: 1")
    assert not forged.verify()


def test_to_dict_has_wire_fields() -> None:
    event = build_text_note("x", PRIVKEY)
    assert set(event.to_dict()) == {"id", "pubkey", "created_at", "kind", "tags", "content", "sig"}


def test_invalid_private_key() -> None:
    with pytest.raises(ValueError):
        public_key_hex("not-hex")
    with pytest.raises(ValueError):
        public_key_hex("abcd")
