"""Infrastructure adapters (database, third-party HTTP APIs)."""
