"""Storage backends for queries, threads and emails."""

from .memory import InMemoryThreadStore

__all__ = ["InMemoryThreadStore"]
