"""Order-book to Nostr sync pipeline: fetch, dedup, persist, publish."""
