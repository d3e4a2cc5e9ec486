"""Tests for the autorank-run command line."""

import signal
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from autorank.cli import build_parser, main, resolve_password, run_job
from autorank.config import Settings
from autorank.core.constants import DEMO_CSV_DATA
from autorank.jobs.cancellation import CancellationToken
from autorank.services.data_service import SheetData


@pytest.fixture
def csv_file(tmp_path: Path) -> Path:
    path = tmp_path / "catalog.csv"
    path.write_text("id,Name,Price\n1,Shoes,14.99\n2,Racket,24.99\n3,Goggles,5.99\n")
    return path


def _args(*argv: str):
    return build_parser().parse_args(list(argv))


def test_parser_requires_a_source():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--username", "jdoe"])


@pytest.mark.parametrize("value", ["0", "-5", "abc"])
def test_parser_rejects_bad_batch_size(value: str):
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--csv", "x.csv", "--batch-size", value])


def test_parser_defaults():
    args = _args("--csv", "x.csv")
    assert args.mode == "simulated"
    assert args.scenario == "SUCCESS"
    assert args.env == "PROD"
    assert args.batch_size is None
    assert args.dry_run is False


def test_resolve_password_sources(monkeypatch: pytest.MonkeyPatch):
    assert resolve_password(_args("--csv", "x.csv", "--password", "flag")) == "flag"

    monkeypatch.setenv("AUTORANK_PASSWORD", "from-env")
    assert resolve_password(_args("--csv", "x.csv")) == "from-env"

    monkeypatch.delenv("AUTORANK_PASSWORD")
    stdin = MagicMock()
    stdin.isatty.return_value = False
    monkeypatch.setattr("autorank.cli.sys.stdin", stdin)
    assert resolve_password(_args("--csv", "x.csv")) == ""

    stdin.isatty.return_value = True
    with patch("autorank.cli.getpass.getpass", return_value="typed"):
        assert resolve_password(_args("--csv", "x.csv")) == "typed"


@pytest.mark.asyncio
async def test_run_job_completes(test_settings: Settings, csv_file: Path):
    previous = signal.getsignal(signal.SIGINT)
    args = _args("--csv", str(csv_file), "--username", "jdoe", "--password", "s3cret")

    assert await run_job(args, test_settings) == 0
    # Handlers are restored once the job is over
    assert signal.getsignal(signal.SIGINT) is previous


@pytest.mark.asyncio
async def test_run_job_login_failure(test_settings: Settings, csv_file: Path):
    args = _args(
        "--csv", str(csv_file),
        "--username", "jdoe",
        "--password", "s3cret",
        "--scenario", "ERROR_AUTH",
    )  # fmt: skip
    assert await run_job(args, test_settings) == 1


@pytest.mark.asyncio
async def test_run_job_upload_failures_still_complete(test_settings: Settings, csv_file: Path):
    args = _args(
        "--csv", str(csv_file),
        "--username", "jdoe",
        "--password", "s3cret",
        "--scenario", "ERROR_UPLOAD",
        "--batch-size", "1",
    )  # fmt: skip
    assert await run_job(args, test_settings) == 0


@pytest.mark.asyncio
async def test_run_job_missing_password(test_settings: Settings, csv_file: Path):
    args = _args("--csv", str(csv_file), "--username", "jdoe", "--password", "")
    assert await run_job(args, test_settings) == 2


@pytest.mark.asyncio
async def test_run_job_missing_file(test_settings: Settings, tmp_path: Path):
    args = _args("--csv", str(tmp_path / "nope.csv"), "--username", "jdoe", "--password", "pw12")
    assert await run_job(args, test_settings) == 2


@pytest.mark.asyncio
async def test_run_job_paused(test_settings: Settings, csv_file: Path):
    token = CancellationToken()
    token.cancel()
    args = _args("--csv", str(csv_file), "--username", "jdoe", "--password", "s3cret")

    with patch("autorank.cli.CancellationToken", return_value=token):
        assert await run_job(args, test_settings) == 130


@pytest.mark.asyncio
async def test_run_job_from_sheet(test_settings: Settings):
    data_service = MagicMock()
    data_service.return_value.load_sheet = AsyncMock(
        return_value=SheetData(csv_text=DEMO_CSV_DATA, from_fallback=True, warnings=["demo"])
    )
    args = _args(
        "--sheet-url", "https://docs.google.com/spreadsheets/d/abc123/edit",
        "--username", "jdoe",
        "--password", "s3cret",
    )  # fmt: skip

    with patch("autorank.cli.DataService", data_service):
        assert await run_job(args, test_settings) == 0

    data_service.return_value.load_sheet.assert_awaited_once_with(
        "https://docs.google.com/spreadsheets/d/abc123/edit"
    )


def test_main_dry_run(csv_file: Path):
    with patch("autorank.cli.ExecutorRegistry") as registry:
        assert main(["--csv", str(csv_file), "--password", "pw12", "--dry-run"]) == 0
    registry.assert_not_called()
