"""In-memory data store for customers, loans and cash movements."""

from lending.store.lending import LendingDataStore

__all__ = ["LendingDataStore"]
