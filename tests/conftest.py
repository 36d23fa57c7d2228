"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import pytest

from sensor_tap.config import BatteryConfig, K30Config

OVERRIDE_ENV = (
    "GATTTOOL",
    "MACADDR",
    "VAR_HANDLE",
    "GATTFLAGS",
    "BATT_STATUS",
    "BATT_VOLTAGE",
    "BATT_CURRENT",
    "BATT_CAPACITY",
    "BATT_HEALTH",
)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "linux: mark test as Linux-specific"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host overrides from leaking into resolution."""
    for name in OVERRIDE_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def battery_dir(tmp_path):
    """A fake power_supply/battery sysfs directory."""
    root = tmp_path / "battery"
    root.mkdir()
    (root / "status").write_text("Charging\n")
    (root / "voltage_now").write_text("4000000\n")
    (root / "current_now").write_text("-250000\n")
    (root / "capacity").write_text("87\n")
    (root / "health").write_text("Good\n")
    return root


@pytest.fixture
def battery_config(battery_dir):
    return BatteryConfig(
        battstatus=str(battery_dir / "status"),
        battvoltage=str(battery_dir / "voltage_now"),
        battcurrent=str(battery_dir / "current_now"),
        battcapacity=str(battery_dir / "capacity"),
        batthealth=str(battery_dir / "health"),
    )


@pytest.fixture
def k30_config():
    return K30Config(
        gatttool="gatttool",
        macaddr="AA:BB:CC:DD:EE:FF",
        varhandle="0x0010",
        gattflags="-t random --char-read",
        timeout_s=10,
    )
