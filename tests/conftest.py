"""
pytest configuration and fixtures for the agent tests.

Provides reusable fixtures for:
- Settings without touching the environment
- Uplink message factories
- Hypothesis property-based testing profiles
"""

import base64
import os
from dataclasses import replace
from datetime import datetime, timezone

import orjson
import pytest
from hypothesis import Verbosity, settings as hypothesis_settings

from iot_agent.common.config import Settings

# Default profile: balanced speed and coverage
hypothesis_settings.register_profile("default", max_examples=200, deadline=None)

# CI profile: more thorough testing
hypothesis_settings.register_profile("ci", max_examples=1000, deadline=None)

# Dev profile: fast iteration
hypothesis_settings.register_profile("dev", max_examples=20, deadline=None)

# Debug profile: verbose output
hypothesis_settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose, deadline=None)

hypothesis_settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


BASE_SETTINGS = Settings(
    mqtt_host="broker.test",
    mqtt_port=8883,
    mqtt_user="",
    mqtt_password="",
    mqtt_topic="application/53/device/#",
    mqtt_qos=0,
    mqtt_tls=False,
    mqtt_tls_insecure=True,
    mqtt_client_id_prefix="diwise/iot-agent",
    dev_mgmt_url="",
    dev_mgmt_timeout_seconds=5.0,
    decoder="axsensor",
    reconnect_max_attempts=3,
    reconnect_base_delay=0.0,
    reconnect_max_delay=0.0,
    log_level="INFO",
)


@pytest.fixture
def make_settings():
    """Settings factory: make_settings(mqtt_tls=True)."""
    def _make(**overrides) -> Settings:
        return replace(BASE_SETTINGS, **overrides)
    return _make


@pytest.fixture
def ts() -> datetime:
    """Fixed reading time."""
    return datetime(2026, 1, 31, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def frame():
    """Build a payload whose scanned first half holds exactly the given chunks.

    Usage:
        def test_x(frame):
            payload = frame("A2 EB 00 A4 64 00")
    """
    def _make(hex_chunks: str) -> bytes:
        data = bytes.fromhex(hex_chunks.replace(" ", ""))
        return data + bytes(len(data))
    return _make


@pytest.fixture
def uplink_message():
    """Factory for raw MQTT uplink bodies."""
    def _make(payload_hex: str = "A2 EB 00", f_port: int = 2, dev_eui: str = "70b3d5e75e003f2a", **extra) -> bytes:
        body = {
            "devEUI": dev_eui,
            "fPort": f_port,
            "data": base64.b64encode(bytes.fromhex(payload_hex.replace(" ", ""))).decode("ascii"),
            "timestamp": "2026-01-31T08:00:00Z",
        }
        body.update(extra)
        return orjson.dumps(body)
    return _make


# Markers for test categorization
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
