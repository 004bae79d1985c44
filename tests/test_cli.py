"""Tests for the ptltectl command line.

The USB write is patched out; these check argument handling, the report
handed to the transport and the exit status.
"""

import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from patlite_lr6_mcp.cli import cli
from patlite_lr6_mcp.config import DeviceConfig
from patlite_lr6_mcp.errors import DeviceNotFound


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def sent():
    with patch("patlite_lr6_mcp.cli.send_report", return_value=8) as mock_send:
        yield mock_send


def _report(mock_send) -> bytes:
    mock_send.assert_called_once()
    return mock_send.call_args.args[0]


def test_help(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for name in ("light", "tower", "buzzer", "report", "reset", "describe", "serve"):
        assert name in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_light(runner, sent):
    result = runner.invoke(cli, ["light", "red", "on"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "ok"
    assert _report(sent) == bytes([0, 0, 15, 0, 31, 255, 240, 0])
    assert sent.call_args.args[1] == DeviceConfig()


def test_light_invalid_color(runner, sent):
    result = runner.invoke(cli, ["light", "purple", "on"])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "purple" in result.output
    sent.assert_not_called()


def test_tower(runner, sent):
    result = runner.invoke(cli, ["tower", "on", "off", "pattern1", "led_off", "keep"])
    assert result.exit_code == 0, result.output
    assert _report(sent) == bytes([0, 0, 0x0F, 0, 0x10, 0x20, 0xF0, 0])


def test_tower_missing_state(runner, sent):
    result = runner.invoke(cli, ["tower", "on", "off", "on", "off"])
    assert result.exit_code == 2
    sent.assert_not_called()


def test_tower_invalid_state(runner, sent):
    result = runner.invoke(cli, ["tower", "on", "off", "on", "off", "disco"])
    assert result.exit_code == 1
    sent.assert_not_called()


def test_buzzer_pattern_and_limit(runner, sent):
    result = runner.invoke(cli, ["buzzer", "buzz_pattern2", "3"])
    assert result.exit_code == 0, result.output
    assert _report(sent) == bytes([0, 0, 0x33, 0xEF, 0xFF, 0xFF, 0xF0, 0])


def test_buzzer_pattern_only(runner, sent):
    result = runner.invoke(cli, ["buzzer", "pattern1"])
    assert result.exit_code == 0, result.output
    assert _report(sent)[2:4] == bytes([0x02, 0xEF])


def test_buzzer_explicit_pitches(runner, sent):
    result = runner.invoke(cli, ["buzzer", "on", "0", "2", "6"])
    assert result.exit_code == 0, result.output
    assert _report(sent)[2:4] == bytes([0x01, 0x26])


def test_buzzer_invalid_pitch(runner, sent):
    result = runner.invoke(cli, ["buzzer", "on", "0", "16"])
    assert result.exit_code == 1
    assert "pitch" in result.output
    sent.assert_not_called()


def test_buzzer_too_many_pitches(runner, sent):
    result = runner.invoke(cli, ["buzzer", "on", "0", "2", "6", "0"])
    assert result.exit_code == 1
    sent.assert_not_called()


def test_report(runner, sent):
    result = runner.invoke(cli, ["report", "0", "0", "15", "0", "31", "255", "240", "0"])
    assert result.exit_code == 0, result.output
    assert _report(sent) == bytes([0, 0, 15, 0, 31, 255, 240, 0])


def test_report_hex(runner, sent):
    result = runner.invoke(cli, ["report", "0", "0", "0x0f", "0", "0x1F", "0xff", "0xf0", "0"])
    assert result.exit_code == 0, result.output
    assert _report(sent) == bytes([0, 0, 15, 0, 31, 255, 240, 0])


def test_report_wrong_length(runner, sent):
    result = runner.invoke(cli, ["report", "0", "0", "15"])
    assert result.exit_code == 1
    assert "8 bytes" in result.output
    sent.assert_not_called()


def test_reset(runner, sent):
    result = runner.invoke(cli, ["reset"])
    assert result.exit_code == 0, result.output
    assert _report(sent) == bytes(8)


def test_dry_run_does_not_send(runner, sent):
    result = runner.invoke(cli, ["--dry-run", "light", "red", "on"])
    assert result.exit_code == 0, result.output
    assert "00 00 0f 00 1f ff f0 00" in result.output
    assert "red: on" in result.output
    sent.assert_not_called()


def test_transport_error(runner, sent):
    sent.side_effect = DeviceNotFound("device 191a:8003 not found")
    result = runner.invoke(cli, ["reset"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_device_ids_from_options(runner, sent):
    result = runner.invoke(
        cli, ["--vendor-id", "0x1234", "--product-id", "22136", "--timeout", "50", "reset"]
    )
    assert result.exit_code == 0, result.output
    assert sent.call_args.args[1] == DeviceConfig(0x1234, 0x5678, 50)


def test_device_ids_from_env(runner, sent):
    result = runner.invoke(cli, ["reset"], env={"PTLTECTL_PRODUCT_ID": "0x00ff"})
    assert result.exit_code == 0, result.output
    assert sent.call_args.args[1].product_id == 0x00FF


def test_invalid_vendor_id(runner, sent):
    result = runner.invoke(cli, ["--vendor-id", "0x10000", "reset"])
    assert result.exit_code == 2
    sent.assert_not_called()


def test_describe(runner, sent):
    result = runner.invoke(cli, ["describe", "0", "0", "0x33", "0xef", "255", "255", "240", "0"])
    assert result.exit_code == 0, result.output
    assert "buzzer: pattern2 limit=3 pitch=0xe/0xf" in result.output
    assert "white: keep" in result.output
    sent.assert_not_called()


def test_serve_logs_at_info(runner):
    """serve raises the root logger to INFO even after the group set WARNING."""
    root = logging.getLogger()
    previous = root.level
    try:
        root.setLevel(logging.WARNING)
        with patch("patlite_lr6_mcp.server.main") as serve_main:
            result = runner.invoke(cli, ["serve"])
        assert result.exit_code == 0, result.output
        serve_main.assert_called_once()
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous)


def test_serve_keeps_debug_verbosity(runner):
    root = logging.getLogger()
    previous = root.level
    try:
        root.setLevel(logging.DEBUG)
        with patch("patlite_lr6_mcp.server.main"):
            result = runner.invoke(cli, ["serve"])
        assert result.exit_code == 0, result.output
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)
