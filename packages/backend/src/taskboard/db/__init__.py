"""Persistence: ORM models, the Database handle, and the Redis pool."""
