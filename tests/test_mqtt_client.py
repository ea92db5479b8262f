"""Tests for the MQTT transport.

The paho client is replaced by a MagicMock through the client factory; the
callbacks the agent registers on it are invoked directly.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from iot_agent.mqtt.client import MQTTAgentClient, TransportError
from iot_agent.resilience.retry import RetryConfig

NO_WAIT = RetryConfig(max_attempts=3, base_delay=0, max_delay=0, jitter=False, retryable_exceptions=(OSError,))


@pytest.fixture
def paho():
    """Fake paho client."""
    return MagicMock()


@pytest.fixture
def make_client(make_settings, paho):
    def _make(on_message=None, **overrides) -> MQTTAgentClient:
        return MQTTAgentClient(
            make_settings(**overrides),
            on_message or MagicMock(),
            retry_config=NO_WAIT,
            client_factory=lambda client_id: paho,
            sleep=lambda seconds: None,
        )
    return _make


def _message(topic="application/53/device/abc/rx", payload=b"{}", mid=7, qos=1):
    return SimpleNamespace(topic=topic, payload=payload, mid=mid, qos=qos)


# =============================================================================
# TEST 1: CONNECT
# =============================================================================

class TestStart:

    def test_connects_and_starts_loop(self, make_client, paho):
        client = make_client()

        client.start()

        paho.connect.assert_called_once_with("broker.test", 8883, keepalive=60)
        paho.loop_start.assert_called_once()
        assert client.is_running is True
        assert client.client_id.startswith("diwise/iot-agent")

    def test_credentials_and_tls(self, make_client, paho):
        client = make_client(mqtt_user="agent", mqtt_password="secret", mqtt_tls=True)

        client.start()

        paho.username_pw_set.assert_called_once_with("agent", "secret")
        paho.tls_set_context.assert_called_once()
        context = paho.tls_set_context.call_args[0][0]
        assert context.check_hostname is False

    def test_no_credentials_no_tls(self, make_client, paho):
        make_client().start()

        paho.username_pw_set.assert_not_called()
        paho.tls_set_context.assert_not_called()

    def test_retries_then_connects(self, make_client, paho):
        paho.connect.side_effect = [OSError("refused"), None]
        client = make_client()

        client.start()

        assert paho.connect.call_count == 2
        assert client.is_running is True

    def test_exhausted_connect_raises_transport_error(self, make_client, paho):
        paho.connect.side_effect = OSError("refused")
        client = make_client()

        with pytest.raises(TransportError) as exc_info:
            client.start()

        assert paho.connect.call_count == 3
        assert exc_info.value.attempts == 3
        assert "refused" in exc_info.value.reason
        paho.loop_start.assert_not_called()
        assert client.is_running is False


# =============================================================================
# TEST 2: CALLBACKS
# =============================================================================

class TestCallbacks:

    def test_subscribes_on_connect(self, make_client, paho):
        client = make_client()
        client.start()

        paho.on_connect(paho, None, {}, 0, None)

        paho.subscribe.assert_called_once_with("application/53/device/#", qos=0)
        assert client.is_connected is True

    def test_refused_connection_not_connected(self, make_client, paho):
        client = make_client()
        client.start()

        paho.on_connect(paho, None, {}, 5, None)

        paho.subscribe.assert_not_called()
        assert client.is_connected is False
        assert client.stats["failed_attempts"] == 1

    def test_message_handled_then_acked(self, make_client, paho):
        handler = MagicMock()
        client = make_client(on_message=handler)
        client.start()

        paho.on_message(paho, None, _message(payload=b'{"x": 1}'))

        handler.assert_called_once_with("application/53/device/abc/rx", b'{"x": 1}')
        paho.ack.assert_called_once_with(7, 1)

    def test_handler_failure_still_acked(self, make_client, paho):
        handler = MagicMock(side_effect=RuntimeError("boom"))
        client = make_client(on_message=handler)
        client.start()

        paho.on_message(paho, None, _message())

        paho.ack.assert_called_once_with(7, 1)


# =============================================================================
# TEST 3: RECONNECTION
# =============================================================================

class TestReconnection:

    def test_disconnect_counts_reconnect(self, make_client, paho):
        client = make_client()
        client.start()
        paho.on_connect(paho, None, {}, 0, None)

        paho.on_disconnect(paho, None, {}, 7, None)

        assert client.is_connected is False
        assert client.stats["reconnect_count"] == 1
        assert client.health_check()["healthy"] is False

    def test_successful_reconnect_resets_budget(self, make_client, paho):
        client = make_client()
        client.start()

        paho.on_connect_fail(paho, None)
        paho.on_connect_fail(paho, None)
        paho.on_connect(paho, None, {}, 0, None)

        assert client.stats["failed_attempts"] == 0
        assert client.last_error is None

    def test_exhausted_budget_reported_by_wait(self, make_client, paho):
        client = make_client()
        client.start()

        for _ in range(3):
            paho.on_connect_fail(paho, None)

        with pytest.raises(TransportError) as exc_info:
            client.wait(poll_interval=0.01)

        assert exc_info.value.attempts == 3
        assert client.is_running is False
        paho.loop_stop.assert_called_once()

    def test_wait_returns_after_timeout(self, make_client):
        client = make_client()
        client.start()

        client.wait(poll_interval=0.01, timeout=0.05)

        assert client.is_running is True

    def test_stop(self, make_client, paho):
        client = make_client()
        client.start()

        client.stop()

        paho.disconnect.assert_called_once()
        paho.loop_stop.assert_called_once()
        assert client.is_running is False
        assert client.stats["connected"] is False
