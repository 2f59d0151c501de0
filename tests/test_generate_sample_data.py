"""Tests for the sample data command line."""

import importlib.util
import json
import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from lending.config import LendingConfig, TreasuryConfig

SCRIPT = Path(__file__).parent.parent / "scripts" / "generate_sample_data.py"


@pytest.fixture(scope="module")
def cli():
    spec = importlib.util.spec_from_file_location("generate_sample_data", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogReceiptsFlag:
    """--log-receipts can be forced either way over the environment."""

    def test_default_from_config(self, cli) -> None:
        config = LendingConfig(treasury=TreasuryConfig(log_receipts=True))

        assert cli.build_parser(config).parse_args([]).log_receipts is True
        assert cli.build_parser(LendingConfig()).parse_args([]).log_receipts is False

    def test_no_log_receipts_overrides_env_default(self, cli) -> None:
        config = LendingConfig(treasury=TreasuryConfig(log_receipts=True))

        assert cli.build_parser(config).parse_args(["--no-log-receipts"]).log_receipts is False

    def test_log_receipts_enables(self, cli) -> None:
        assert cli.build_parser(LendingConfig()).parse_args(["--log-receipts"]).log_receipts is True


@pytest.mark.usefixtures("restore_logging")
class TestMain:
    """Tests for the end-to-end run."""

    def _run(self, cli, tmp_path: Path, *extra: str) -> int:
        argv = [
            "--customers", "10",
            "--history-days", "180",
            "--reference-date", "2025-06-30",
            "--output-dir", str(tmp_path),
            *extra,
        ]
        with patch.dict(os.environ, {"TREASURY_LOG_RECEIPTS": "true"}, clear=True):
            return cli.main(argv)

    def test_no_log_receipts_writes_no_receipts(self, cli, tmp_path: Path) -> None:
        assert self._run(cli, tmp_path, "--no-log-receipts") == 0

        movements = json.loads((tmp_path / "cash_movements.json").read_text(encoding="utf-8"))
        assert movements
        assert all(m["type"] != "RECEBIMENTO" for m in movements)

    def test_env_default_writes_receipts(self, cli, tmp_path: Path) -> None:
        assert self._run(cli, tmp_path) == 0

        movements = json.loads((tmp_path / "cash_movements.json").read_text(encoding="utf-8"))
        assert any(m["type"] == "RECEBIMENTO" for m in movements)
