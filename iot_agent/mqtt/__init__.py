"""MQTT transport for the agent.

Modules:
- client.py          → paho-mqtt subscriber with bounded reconnect
- message_handler.py → uplink JSON → decoder → sink
- handler_stats.py   → handler counters
- metrics.py         → Prometheus metrics
"""

from .client import MQTTAgentClient, TransportError
from .handler_stats import HandlerStats
from .message_handler import MessageHandler, dev_eui_from_topic

__all__ = [
    "MQTTAgentClient",
    "TransportError",
    "HandlerStats",
    "MessageHandler",
    "dev_eui_from_topic",
]
