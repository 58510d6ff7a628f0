# tests/test_main.py
import json
from unittest.mock import AsyncMock, patch

import pytest

from routeros_core import main as cli
from routeros_core.records import DeviceReport

DEVICES_TOML = """
[device.edge]
host = "10.0.0.1"
username = "api"
password = "one"

[device.core]
host = "10.0.0.2"
username = "api"
password = "two"
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "devices.toml"
    path.write_text(DEVICES_TOML, encoding="utf-8")
    return path


def _reports(*flags):
    return [
        DeviceReport(device=name, success=ok, error=None if ok else "连接失败")
        for name, ok in flags
    ]


def test_all_devices_success(config_file, capsys):
    scan_all = AsyncMock(return_value=_reports(("edge", True), ("core", True)))
    with patch.object(cli.DeviceScanner, "scan_all", scan_all):
        code = cli.main(["--config", str(config_file), "--summary"])

    assert code == cli.EXIT_OK
    targets = scan_all.call_args.args[0]
    assert [t.name for t in targets] == ["edge", "core"]

    output = json.loads(capsys.readouterr().out)
    assert [r["device"] for r in output["results"]] == ["edge", "core"]


def test_single_device_with_failure(config_file, capsys):
    scan_all = AsyncMock(return_value=_reports(("core", False)))
    with patch.object(cli.DeviceScanner, "scan_all", scan_all):
        code = cli.main(["--config", str(config_file), "--device", "core"])

    assert code == cli.EXIT_DEVICE_FAILED
    (target,) = scan_all.call_args.args[0]
    assert target.host == "10.0.0.2"

    output = json.loads(capsys.readouterr().out)
    assert output["results"][0]["error"] == "连接失败"
    assert output["results"][0]["filter_rules"] == []


def test_config_error_exit_code(tmp_path):
    assert cli.main(["--config", str(tmp_path / "missing.toml")]) == cli.EXIT_CONFIG_ERROR


def test_unknown_device(config_file):
    assert cli.main(["--config", str(config_file), "--device", "nope"]) == cli.EXIT_CONFIG_ERROR


def test_scanner_options_are_forwarded(config_file):
    with patch.object(cli, "DeviceScanner") as scanner_cls:
        scanner_cls.return_value.scan_all = AsyncMock(return_value=[])
        cli.main(
            [
                "--config",
                str(config_file),
                "--reuse-session",
                "--log-topic",
                "system",
                "--log-limit",
                "10",
                "--concurrency",
                "8",
            ]
        )

    scanner_cls.assert_called_once_with(log_topic="system", log_limit=10, reuse_session=True)
    assert scanner_cls.return_value.scan_all.call_args.kwargs["concurrency"] == 8
