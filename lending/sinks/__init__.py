"""Output sinks for exporting store snapshots and lending events."""

from lending.sinks.console import ConsoleSink
from lending.sinks.json_file import JsonFileSink, load_store
from lending.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink", "load_store"]
