"""Prometheus metrics for the agent."""

from __future__ import annotations

from prometheus_client import Counter, Gauge

MESSAGES_TOTAL = Counter(
    "iot_agent_messages_total",
    "Uplink messages handled",
    ["status"],  # decoded, invalid_message, invalid_port, truncated, lookup_error, sink_error, processing_error
)

OBJECTS_TOTAL = Counter(
    "iot_agent_objects_total",
    "Canonical objects produced",
    ["urn"],
)

MQTT_CONNECTED = Gauge(
    "iot_agent_mqtt_connected",
    "MQTT connection status",
)
