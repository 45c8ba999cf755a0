"""Configuration for Redis, storage and transfer policy."""
