"""Kafka sink for publishing lending records and events."""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from confluent_kafka import Producer

from lending.config import KafkaConfig
from lending.engine.ledger import LedgerUpdate
from lending.models.base import Event
from lending.models.lending import CashMovement, Loan
from lending.sinks.serialization import (
    cash_movement_to_record,
    installment_to_record,
    loan_to_record,
    payment_to_record,
    serialize_value,
    to_record,
)

logger = logging.getLogger(__name__)

EVENT_SOURCE = "lending-core"


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0


def _event(event_type: str, subject: str, data: dict, event_time: datetime | None = None) -> Event:
    return Event(
        event_id=str(uuid.uuid4()),
        event_type=event_type,
        event_time=event_time or datetime.now(),
        source=EVENT_SOURCE,
        subject=subject,
        data=data,
    )


def loan_created_event(loan: Loan) -> Event:
    return _event("loan.created", loan.loan_id, loan_to_record(loan), loan.created_at)


def ledger_event(update: LedgerUpdate) -> Event | None:
    """Event for an applied ledger transition; ``None`` when nothing changed.

    ``installment.settled``, ``installment.partially_paid`` or
    ``installment.reversed``, keyed on the loan so that a consumer sees one
    contract's history in order.
    """
    if not update.applied:
        return None

    if not update.installment.is_paid:
        event_type = "installment.partially_paid" if update.payment else "installment.reversed"
    else:
        event_type = "installment.settled"

    data = {
        "loanId": update.loan.loan_id,
        "contractNumber": str(update.loan.contract_number),
        "installment": installment_to_record(update.installment),
    }
    if update.payment is not None:
        data["payment"] = payment_to_record(update.payment)

    event_time = update.payment.paid_at if update.payment else None
    return _event(event_type, update.loan.loan_id, data, event_time)


def cash_movement_event(movement: CashMovement) -> Event:
    return _event(
        "cash_movement.recorded",
        movement.movement_id,
        cash_movement_to_record(movement),
        movement.created_at,
    )


class KafkaSink:
    """Output records and events to Kafka topics."""

    def __init__(self, config: KafkaConfig | str) -> None:
        """Initialize Kafka sink.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or bootstrap servers string.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.producer = Producer(config.to_dict())
        self.stats = ProducerStats()

    @property
    def events_topic(self) -> str:
        return f"{self.config.topic_prefix}.events"

    def topic_for(self, entity_type: str) -> str:
        # cash_movements -> dev.lending.cash-movements
        return f"{self.config.topic_prefix}.{entity_type.replace('_', '-')}"

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def send(self, topic: str, data: dict, key: str | None = None) -> None:
        """Send a single JSON document to a topic."""
        value = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.producer.produce(
            topic=topic,
            key=key.encode("utf-8") if key else None,
            value=value,
            callback=self._delivery_callback,
        )
        self.stats.sent += 1
        self.producer.poll(0)

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to the entity's topic, keyed by record id."""
        topic = self.topic_for(entity_type)
        logger.info("Writing batch to %s: %d records", topic, len(records))

        for record in records:
            data = to_record(record)
            self.send(topic, data, key=data.get("id"))

        self.flush()
        logger.info("Batch complete: sent=%d, delivered=%d, failed=%d",
                    self.stats.sent, self.stats.delivered, self.stats.failed)

    def publish(self, event: Event) -> None:
        """Publish an event envelope keyed by its subject."""
        data = {
            "eventId": event.event_id,
            "eventType": event.event_type,
            "eventTime": serialize_value(event.event_time),
            "source": event.source,
            "subject": event.subject,
            "data": serialize_value(event.data),
            "metadata": serialize_value(event.metadata),
        }
        self.send(self.events_topic, data, key=event.subject)

    def publish_update(self, update: LedgerUpdate) -> bool:
        """Publish the event for a ledger transition; returns whether one was sent."""
        event = ledger_event(update)
        if event is None:
            return False
        self.publish(event)
        return True

    def publish_history(
        self,
        loans: list[Loan],
        updates: list[LedgerUpdate],
        movements: list[CashMovement],
    ) -> int:
        """Publish a book's lifecycle events in time order.

        ``loan.created`` per loan, one event per applied ledger transition
        and ``cash_movement.recorded`` per treasury entry. Returns the number
        of events sent.
        """
        events = [loan_created_event(loan) for loan in loans]
        events.extend(event for event in map(ledger_event, updates) if event is not None)
        events.extend(cash_movement_event(movement) for movement in movements)
        events.sort(key=lambda event: event.event_time)

        for event in events:
            self.publish(event)

        self.flush()
        logger.info("Published %d events to %s", len(events), self.events_topic)
        return len(events)

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        remaining = self.producer.flush(timeout)
        if remaining:
            logger.warning("%s message(s) still queued after flush", remaining)

    def close(self) -> None:
        """Flush and close the producer."""
        self.flush()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
