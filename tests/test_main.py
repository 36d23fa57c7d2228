"""End-to-end tests for the command line entry point."""
from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from sensor_tap import inputs
from sensor_tap.collector import BatteryReader, K30Reader
from sensor_tap.main import main, render_sample_config


@pytest.fixture
def linux_registry():
    with patch.dict(
        inputs._registry, {"k30_reader": K30Reader, "pine_64": BatteryReader}, clear=True
    ):
        yield


def test_render_sample_config(linux_registry):
    text = render_sample_config()

    assert "# k30_reader: Collect CO2 Readings" in text
    assert "[pine_64]" in text


@pytest.mark.integration
def test_once_dry_run_dumps_battery_payload(tmp_path, battery_dir, linux_registry):
    config = tmp_path / "app.cfg"
    config.write_text(
        "[inputs]\n"
        "enabled = pine_64\n"
        "[pine_64]\n"
        f"battstatus = {battery_dir / 'status'}\n"
        f"battvoltage = {battery_dir / 'voltage_now'}\n"
        f"battcurrent = {battery_dir / 'current_now'}\n"
        f"battcapacity = {battery_dir / 'capacity'}\n"
        f"batthealth = {battery_dir / 'health'}\n"
    )
    dump = tmp_path / "payload.json"
    argv = [
        "sensor-tap", "--config", str(config), "--once", "--dry-run",
        "--dump-json", str(dump),
    ]

    with patch("sys.argv", argv), patch("sensor_tap.main.MqttPublisher") as publisher:
        main()

    publisher.assert_not_called()
    payload = json.loads(dump.read_text())
    fields = payload["metrics"]["battery"]["fields"]
    assert fields["status"] == "Charging"
    assert fields["capacity"] == 87.0
    assert "k30_reader" not in payload["metrics"]


@pytest.mark.integration
def test_once_publishes_discovery_and_payload(tmp_path, battery_config, linux_registry):
    config = tmp_path / "app.cfg"
    config.write_text("[inputs]\nenabled = pine_64\n")
    argv = ["sensor-tap", "--config", str(config), "--once"]

    with patch("sys.argv", argv), \
            patch("sensor_tap.main.MqttPublisher") as publisher_cls, \
            patch("sensor_tap.collector.BatteryReader.from_config",
                  return_value=BatteryReader(battery_config)):
        main()

    publisher = publisher_cls.return_value
    publisher.connect.assert_called_once()
    publisher.publish_discovery.assert_called_once()
    published = json.loads(publisher.publish.call_args.args[0])
    assert published["metrics"]["battery"]["tags"] == {"sensor": "battery"}
    publisher.disconnect.assert_called_once()
