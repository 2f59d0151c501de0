"""JSON file sink: store snapshots written as one file per collection."""

import json
import logging
from decimal import InvalidOperation
from pathlib import Path
from typing import Any

from lending.config import LendingConfig
from lending.exceptions import LendingError, SinkError
from lending.sinks.serialization import (
    cash_movement_from_record,
    customer_from_record,
    loan_from_record,
    to_record,
)
from lending.store.lending import LendingDataStore

logger = logging.getLogger(__name__)

COLLECTIONS = ("customers", "loans", "cash_movements")


class JsonFileSink:
    """Output records to JSON files."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to ``<entity_type>.json``, replacing it."""
        file_path = self.output_dir / f"{entity_type}.json"
        data = [to_record(record) for record in records]

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(data, f, ensure_ascii=False)
        except OSError as exc:
            raise SinkError(f"Cannot write {file_path}: {exc}") from exc

        self._counts[entity_type] = len(records)
        logger.debug("Wrote %d %s to %s", len(records), entity_type, file_path)

    def write_store(self, store: LendingDataStore) -> None:
        """Write a full snapshot of ``store``."""
        self.write_batch("customers", list(store.customers.values()))
        self.write_batch("loans", list(store.loans.values()))
        self.write_batch("cash_movements", list(store.cash_movements.values()))

    def close(self) -> None:
        """Print summary."""
        print(f"JSON files written to: {self.output_dir}")
        for entity_type, count in self._counts.items():
            print(f"  {entity_type}: {count} records")


def _read(path: Path) -> list[dict[str, Any]]:
    if not path.exists():
        return []
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise SinkError(f"Cannot read {path}: {exc}") from exc
    if not isinstance(data, list):
        raise SinkError(f"{path} does not hold a list of records")
    return data


def load_store(input_dir: str | Path, config: LendingConfig | None = None) -> LendingDataStore:
    """Rebuild a store from a snapshot written by :class:`JsonFileSink`.

    Missing files are treated as empty collections. Records go through the
    store's own checks, so a snapshot with duplicate CPFs or contract
    numbers is refused.

    Raises
    ------
    SinkError
        If a file cannot be parsed or a record is malformed or rejected.
    """
    input_dir = Path(input_dir)
    store = LendingDataStore(config=config or LendingConfig())

    try:
        for record in _read(input_dir / "customers.json"):
            store.add_customer(customer_from_record(record))
        for record in _read(input_dir / "loans.json"):
            store.add_loan(loan_from_record(record))
        for record in _read(input_dir / "cash_movements.json"):
            movement = cash_movement_from_record(record)
            store.cash_movements[movement.movement_id] = movement
    except SinkError:
        raise
    except (KeyError, TypeError, ValueError, InvalidOperation, LendingError) as exc:
        raise SinkError(f"Invalid snapshot in {input_dir}: {exc!r}") from exc

    logger.info("Loaded store from %s: %s", input_dir, store.summary())
    return store
