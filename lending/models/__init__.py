"""Domain models for the lending back office."""

from lending.models.base import DateRange, Event

__all__ = ["DateRange", "Event"]
