"""Infrastructure adapters: hashing, tokens, persistence and events."""
