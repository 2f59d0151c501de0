#!/usr/bin/env python3
"""Generate a sample lending book and export it.

This script builds a portfolio of borrowers, contracts and payment history
as of a reference date and writes it to:
- JSON files (customers.json, loans.json, cash_movements.json), readable
  back with ``lending.sinks.load_store``
- the console (--console)
- Kafka topics (--kafka), one per collection

Defaults come from the environment (see ``LendingConfig.from_env``).
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lending.config import LendingConfig
from lending.exceptions import LendingError
from lending.logging import setup_logging
from lending.scenarios import SamplePortfolioScenario
from lending.sinks import ConsoleSink, JsonFileSink, KafkaSink

logger = logging.getLogger(__name__)


def build_parser(config: LendingConfig) -> argparse.ArgumentParser:
    """Command-line options, defaulted from ``config``."""
    parser = argparse.ArgumentParser(description="Generate a sample lending book")
    parser.add_argument(
        "--customers",
        type=int,
        default=50,
        help="Number of borrowers to generate (default: 50)",
    )
    parser.add_argument(
        "--max-loans",
        type=int,
        default=3,
        help="Maximum contracts per borrower (default: 3)",
    )
    parser.add_argument(
        "--history-days",
        type=int,
        default=180,
        help="Days of contract history before the reference date (default: 180)",
    )
    parser.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        default=None,
        help="Reference date as YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed if config.seed is not None else 42,
        help="Random seed for reproducibility (default: SEED or 42)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=config.output.json_output_dir,
        help="Directory for JSON files (default: OUTPUT_DIR or ./output)",
    )
    parser.add_argument(
        "--log-receipts",
        action=argparse.BooleanOptionalAction,
        default=config.treasury.log_receipts,
        help="Write RECEIPT/REVERSAL journal entries to the treasury (default: TREASURY_LOG_RECEIPTS)",
    )
    parser.add_argument("--console", action="store_true", help="Also print records to stdout")
    parser.add_argument("--kafka", action="store_true", help="Also publish records and lifecycle events to Kafka")
    parser.add_argument(
        "--log-format",
        choices=["standard", "json"],
        default="standard",
        help="Log output format (default: standard)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    config = LendingConfig.from_env()
    args = build_parser(config).parse_args(argv)

    setup_logging(config.log_level, args.log_format)
    config.treasury.log_receipts = args.log_receipts

    scenario = SamplePortfolioScenario(
        num_customers=args.customers,
        max_loans_per_customer=args.max_loans,
        history_days=args.history_days,
        reference_date=args.reference_date,
        seed=args.seed,
        config=config,
    )

    sinks = [JsonFileSink(args.output_dir, pretty=config.output.pretty_json)]
    if args.console:
        sinks.append(ConsoleSink(pretty=False, max_records=5))
    if args.kafka:
        sinks.append(KafkaSink(config.kafka))

    try:
        scenario.generate()
        scenario.export(sinks)
    except LendingError as exc:
        logger.error("Sample generation failed: %s", exc)
        return 1
    finally:
        for sink in sinks:
            sink.close()

    print(json.dumps(scenario.get_portfolio_summary(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
