"""CLI and demo loop tests."""

import logging
from types import SimpleNamespace

import httpx
import pytest

from backend import main as cli
from backend.demo_runner import run_demo
from backend.logging_config import configure_logging, resolve_level
from backend.transport import SnapshotTransport
from tests.fakes.fake_host import RecordingReceiver


def test_demo_command_passes_settings_and_reports_success(monkeypatch) -> None:
    seen = {}

    def fake_run_demo(seconds, tps, seed, settings):
        seen.update(seconds=seconds, tps=tps, seed=seed, settings=settings)
        return SimpleNamespace(consecutive_failures=0)

    monkeypatch.setattr("backend.demo_runner.run_demo", fake_run_demo)

    code = cli.main(["demo", "--seconds", "0.5", "--tps", "120", "--seed", "3", "--port", "5600", "--debug"])

    assert code == 0
    assert seen["seconds"] == 0.5 and seen["tps"] == 120 and seen["seed"] == 3
    assert seen["settings"].port == 5600
    assert seen["settings"].enable_debug is True


def test_demo_command_fails_when_last_delivery_failed(monkeypatch) -> None:
    monkeypatch.setattr(
        "backend.demo_runner.run_demo",
        lambda **kwargs: SimpleNamespace(consecutive_failures=2),
    )

    assert cli.main(["demo", "--seconds", "0"]) == 1


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        cli.main([])


def test_run_demo_drives_real_pipeline(monkeypatch, settings) -> None:
    receiver = RecordingReceiver()
    original_init = SnapshotTransport.__init__

    def with_mock_transport(self, notifier=None, transport=None):
        original_init(self, notifier, transport=httpx.MockTransport(receiver))

    monkeypatch.setattr(SnapshotTransport, "__init__", with_mock_transport)

    # 1.5s at 120 tps crosses tick 1, 61, 121 ...
    service = run_demo(seconds=1.5, tps=120, seed=5, settings=settings)

    assert service.dispatcher.dispatched_cycles >= 2
    assert len(receiver.requests) == service.dispatcher.dispatched_cycles
    assert service.consecutive_failures == 0


def test_configure_logging_honours_env_level(monkeypatch) -> None:
    monkeypatch.setenv("RIMIO_LOG_LEVEL", "warning")

    logger = configure_logging()

    assert logger.name == "rimio.backend"
    assert logger.level == logging.WARNING
    assert logging.getLogger("core").level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING


def test_unknown_log_level_falls_back_to_info(monkeypatch) -> None:
    monkeypatch.delenv("RIMIO_LOG_LEVEL", raising=False)

    assert resolve_level("chatty") == logging.INFO
    assert resolve_level(" debug ") == logging.DEBUG
    assert resolve_level() == logging.INFO


def test_malformed_port_environment_is_a_usage_error(monkeypatch, capsys) -> None:
    monkeypatch.setenv("RIMIO_PORT", "not-a-port")
    monkeypatch.setattr("backend.demo_runner.run_demo", lambda **kwargs: pytest.fail("demo must not start"))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["demo", "--seconds", "0"])

    assert excinfo.value.code == 2
    assert "RIMIO_PORT must be an integer" in capsys.readouterr().err


def test_demo_host_and_port_default_to_environment(monkeypatch) -> None:
    seen = {}
    monkeypatch.setenv("RIMIO_HOST", "colony-pc")
    monkeypatch.setenv("RIMIO_PORT", "5700")
    monkeypatch.setattr(
        "backend.demo_runner.run_demo",
        lambda **kwargs: seen.update(kwargs) or SimpleNamespace(consecutive_failures=0),
    )

    assert cli.main(["demo", "--seconds", "0"]) == 0
    assert seen["settings"].data_url == "http://colony-pc:5700/GameData"
