"""MQTT client for receiving sensor uplinks.

Uses paho-mqtt to subscribe to the application topic and hands every
message to a handler callback, acknowledging it once the handler returns.

Connection loss never aborts the process: paho reconnects with backoff,
and after ``RECONNECT_MAX_ATTEMPTS`` consecutive failures the client reports
a TransportError through wait().
"""

from __future__ import annotations

import logging
import ssl
import threading
import time
import uuid
from typing import Any, Callable, Optional

import paho.mqtt.client as mqtt

from ..common.config import Settings
from ..resilience.retry import RetryConfig, retry_with_backoff
from . import metrics

logger = logging.getLogger(__name__)

MessageCallback = Callable[[str, bytes], Any]
ClientFactory = Callable[[str], Any]


class TransportError(Exception):
    """The MQTT connection could not be established or kept alive."""

    def __init__(self, broker: str, reason: str, attempts: int = 0):
        self.broker = broker
        self.reason = reason
        self.attempts = attempts
        super().__init__(f"MQTT transport failure for {broker} after {attempts} attempts: {reason}")


def _default_client_factory(client_id: str) -> mqtt.Client:
    return mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        protocol=mqtt.MQTTv311,
        manual_ack=True,
    )


def _reason_failed(reason_code) -> bool:
    is_failure = getattr(reason_code, "is_failure", None)
    if is_failure is not None:
        return bool(is_failure)
    return reason_code != 0


class MQTTAgentClient:
    """MQTT subscriber for the agent.

    Responsibilities:
    - Connect to the broker (TLS, credentials) with bounded retries
    - Subscribe on every (re)connect
    - Delegate messages to the handler and acknowledge them
    - Report a TransportError once the reconnect budget is spent
    """

    def __init__(
        self,
        settings: Settings,
        on_message: MessageCallback,
        retry_config: Optional[RetryConfig] = None,
        client_factory: Optional[ClientFactory] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._settings = settings
        self._on_message_cb = on_message
        self._retry_config = retry_config or RetryConfig(
            max_attempts=settings.reconnect_max_attempts,
            base_delay=settings.reconnect_base_delay,
            max_delay=settings.reconnect_max_delay,
            retryable_exceptions=(OSError,),
        )
        self._client_factory = client_factory or _default_client_factory
        self._sleep = sleep

        self.client_id = f"{settings.mqtt_client_id_prefix}{uuid.uuid4()}"
        self._client: Optional[Any] = None
        self._running = False
        self._connected = False

        self._failed_attempts = 0
        self._reconnect_count = 0
        self._error: Optional[TransportError] = None
        self._fatal = threading.Event()

    @property
    def broker(self) -> str:
        return f"{self._settings.mqtt_host}:{self._settings.mqtt_port}"

    def start(self) -> None:
        """Connect and start the network loop.

        Raises:
            TransportError: the broker could not be reached within the retry budget
        """
        client = self._client_factory(self.client_id)
        self._client = client

        client.on_connect = self._on_connect
        client.on_connect_fail = self._on_connect_fail
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message

        if self._settings.mqtt_user:
            client.username_pw_set(self._settings.mqtt_user, self._settings.mqtt_password)

        if self._settings.mqtt_tls:
            client.tls_set_context(self._tls_context())

        client.reconnect_delay_set(
            min_delay=max(1, int(self._retry_config.base_delay)),
            max_delay=max(1, int(self._retry_config.max_delay)),
        )

        connect = retry_with_backoff(config=self._retry_config, sleep=self._sleep)(self._connect_once)

        logger.info("[MQTT] Connecting to %s as %s", self.broker, self.client_id)
        try:
            connect()
        except self._retry_config.retryable_exceptions as e:
            self._error = TransportError(self.broker, str(e), attempts=self._retry_config.max_attempts)
            logger.error("[MQTT] %s", self._error)
            raise self._error from e

        client.loop_start()
        self._running = True

    def _connect_once(self) -> None:
        self._client.connect(self._settings.mqtt_host, self._settings.mqtt_port, keepalive=60)

    def _tls_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if self._settings.mqtt_tls_insecure:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def stop(self) -> None:
        """Disconnect and stop the network loop."""
        self._running = False

        if self._client:
            try:
                self._client.disconnect()
                self._client.loop_stop()
            except Exception as e:
                logger.warning("[MQTT] Error stopping: %s", e)

        self._connected = False
        metrics.MQTT_CONNECTED.set(0)
        logger.info("[MQTT] Stopped. reconnects=%d", self._reconnect_count)

    def wait(self, poll_interval: float = 1.0, timeout: Optional[float] = None) -> None:
        """Block while the client runs.

        Returns when stopped or when ``timeout`` elapses.

        Raises:
            TransportError: the reconnect budget was exhausted
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        while self._running:
            if self._fatal.wait(poll_interval):
                self.stop()
                raise self._error
            if deadline is not None and time.monotonic() >= deadline:
                return

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        """Connection callback."""
        if _reason_failed(reason_code):
            self._connected = False
            logger.error("[MQTT] Connection refused: %s", reason_code)
            self._record_failed_attempt(f"connection refused: {reason_code}")
            return

        if self._failed_attempts or self._reconnect_count:
            logger.info("[MQTT] Reconnected after %d failed attempts", self._failed_attempts)
        self._connected = True
        self._failed_attempts = 0
        metrics.MQTT_CONNECTED.set(1)
        logger.info("[MQTT] Connected to broker %s", self.broker)

        client.subscribe(self._settings.mqtt_topic, qos=self._settings.mqtt_qos)
        logger.info("[MQTT] Subscribed to %s", self._settings.mqtt_topic)

    def _on_connect_fail(self, client, userdata):
        """Called by the network loop when a reconnect attempt fails."""
        self._record_failed_attempt("reconnect failed")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        """Disconnect callback."""
        was_connected = self._connected
        self._connected = False
        metrics.MQTT_CONNECTED.set(0)

        if not self._running:
            return

        if was_connected:
            self._reconnect_count += 1
        logger.warning("[MQTT] Connection lost (reason=%s), reconnecting", reason_code)

    def _record_failed_attempt(self, reason: str) -> None:
        self._failed_attempts += 1
        logger.warning(
            "[MQTT] Connect attempt %d/%d failed: %s",
            self._failed_attempts, self._retry_config.max_attempts, reason,
        )

        if self._failed_attempts >= self._retry_config.max_attempts and not self._fatal.is_set():
            self._error = TransportError(self.broker, reason, attempts=self._failed_attempts)
            logger.error("[MQTT] %s", self._error)
            self._fatal.set()

    def _on_message(self, client, userdata, msg):
        """Message callback - delegates to the handler, then acknowledges."""
        try:
            self._on_message_cb(msg.topic, msg.payload)
        except Exception as e:
            logger.exception("[MQTT] Processing error: %s (topic=%s)", e, msg.topic)
        finally:
            client.ack(msg.mid, msg.qos)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def last_error(self) -> Optional[TransportError]:
        return self._error

    @property
    def stats(self) -> dict:
        return {
            "running": self._running,
            "connected": self._connected,
            "broker": self.broker,
            "topic": self._settings.mqtt_topic,
            "client_id": self.client_id,
            "reconnect_count": self._reconnect_count,
            "failed_attempts": self._failed_attempts,
            "last_error": str(self._error) if self._error else None,
        }

    def health_check(self) -> dict:
        return {
            "healthy": self._running and self._connected,
            "running": self._running,
            "connected": self._connected,
            "reconnect_count": self._reconnect_count,
        }
