"""Message handling logic for the MQTT client.

Flow per uplink:
  JSON body (orjson)
  → validate_uplink
  → device identity lookup
  → decoder
  → sink

Malformed and mis-ported uplinks are not transient: they are logged, counted
and dropped, never retried.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import orjson

from ..decoder import DecodeError, DecoderFunc, FrameTruncated, InvalidPort
from ..domain.device_management import DeviceLookupError, DeviceManagementClient
from ..domain.sink import ObjectSink
from ..domain.uplink import validate_uplink
from . import metrics
from .handler_stats import HandlerStats

logger = logging.getLogger(__name__)


def dev_eui_from_topic(topic: str) -> Optional[str]:
    """Extract the devEUI from application/<app>/device/<devEUI>/<event>."""
    parts = topic.split("/")
    if len(parts) >= 4 and parts[0] == "application" and parts[2] == "device" and parts[3]:
        return parts[3]
    return None


class MessageHandler:
    """Turns raw MQTT uplinks into canonical objects published to a sink."""

    def __init__(
        self,
        decoder: DecoderFunc,
        device_client: DeviceManagementClient,
        sink: ObjectSink,
        stats: Optional[HandlerStats] = None,
    ):
        self._decoder = decoder
        self._device_client = device_client
        self._sink = sink
        self._stats = stats or HandlerStats()

    @property
    def stats(self) -> HandlerStats:
        return self._stats

    def handle(self, topic: str, payload: bytes) -> bool:
        """Process one uplink.

        Returns:
            True if objects were decoded and published, False if the message was dropped
        """
        self._stats.received += 1
        self._stats.last_message_at = time.time()

        logger.debug("[HANDLER] received payload on %s (%d bytes)", topic, len(payload))

        try:
            data = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            return self._drop("invalid_message", "[HANDLER] Invalid JSON: %s (topic=%s)", e, topic)

        if isinstance(data, dict) and "devEUI" not in data and "dev_eui" not in data:
            topic_eui = dev_eui_from_topic(topic)
            if topic_eui:
                data["devEUI"] = topic_eui

        validation = validate_uplink(data)
        if not validation.valid:
            return self._drop("invalid_message", "[HANDLER] Validation failed: %s (topic=%s)", validation.error, topic)

        for warn in validation.warnings:
            logger.debug("[HANDLER] Warning: %s", warn)

        event = validation.event

        try:
            device = self._device_client.find_device_from_dev_eui(event.dev_eui)
        except DeviceLookupError as e:
            return self._drop("lookup_error", "[HANDLER] %s", e)

        try:
            objects = self._decoder(event.f_port, event.payload, device.internal_id, event.received_at)
        except InvalidPort as e:
            return self._drop("invalid_port", "[HANDLER] Dropping uplink from %s: %s", event.dev_eui, e)
        except FrameTruncated as e:
            return self._drop("truncated", "[HANDLER] Dropping uplink from %s: %s", event.dev_eui, e)
        except DecodeError as e:
            return self._drop("processing_error", "[HANDLER] Dropping uplink from %s: %s", event.dev_eui, e)

        if not self._sink.publish(objects):
            return self._drop("sink_error", "[HANDLER] Sink rejected %d objects from %s", len(objects), event.dev_eui)

        self._stats.decoded += 1
        self._stats.objects += len(objects)
        metrics.MESSAGES_TOTAL.labels(status="decoded").inc()
        for obj in objects:
            metrics.OBJECTS_TOTAL.labels(urn=obj.urn).inc()

        logger.debug(
            "[HANDLER] Decoded %d objects for device=%s devEUI=%s",
            len(objects), device.internal_id, event.dev_eui,
        )

        if self._stats.decoded % 100 == 0:
            logger.info("[HANDLER] %s", self._stats)

        return True

    def _drop(self, status: str, msg: str, *args) -> bool:
        logger.warning(msg, *args)
        self._stats.record_failure(status)
        metrics.MESSAGES_TOTAL.labels(status=status).inc()
        return False
