"""Configuration management for lending-core."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from lending.exceptions import ConfigurationError

DEFAULT_PENALTY_DAILY_RATE = Decimal("0.015")
DEFAULT_CONTRACT_BASE_NUMBER = 2026001


@dataclass
class PenaltyConfig:
    """Late-fee accrual settings."""

    daily_rate: Decimal = DEFAULT_PENALTY_DAILY_RATE  # 1.5% of the installment per day


@dataclass
class ContractConfig:
    """Contract numbering settings."""

    base_number: int = DEFAULT_CONTRACT_BASE_NUMBER


@dataclass
class TreasuryConfig:
    """Treasury journal settings."""

    # Write RECEIPT/REVERSAL journal entries when installments are paid or reversed
    log_receipts: bool = False


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "dev.lending"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class LendingConfig:
    """Main configuration for lending-core."""

    penalty: PenaltyConfig = field(default_factory=PenaltyConfig)
    contracts: ContractConfig = field(default_factory=ContractConfig)
    treasury: TreasuryConfig = field(default_factory=TreasuryConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "LendingConfig":
        """Create config from environment variables."""
        import os

        try:
            daily_rate = Decimal(os.getenv("PENALTY_DAILY_RATE", str(DEFAULT_PENALTY_DAILY_RATE)))
        except InvalidOperation as exc:
            raise ConfigurationError(
                f"PENALTY_DAILY_RATE is not a number: {os.getenv('PENALTY_DAILY_RATE')!r}"
            ) from exc
        if daily_rate < 0:
            raise ConfigurationError("PENALTY_DAILY_RATE must not be negative")

        try:
            base_number = int(os.getenv("CONTRACT_BASE_NUMBER", str(DEFAULT_CONTRACT_BASE_NUMBER)))
        except ValueError as exc:
            raise ConfigurationError(
                f"CONTRACT_BASE_NUMBER is not an integer: {os.getenv('CONTRACT_BASE_NUMBER')!r}"
            ) from exc

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic_prefix=os.getenv("TOPIC_PREFIX", "dev.lending"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            penalty=PenaltyConfig(daily_rate=daily_rate),
            contracts=ContractConfig(base_number=base_number),
            treasury=TreasuryConfig(
                log_receipts=os.getenv("TREASURY_LOG_RECEIPTS", "false").lower() == "true",
            ),
            kafka=kafka,
            output=output,
            seed=int(os.getenv("SEED")) if os.getenv("SEED") else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
