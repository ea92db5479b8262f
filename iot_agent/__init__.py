"""IoT agent - decodes binary sensor uplinks into canonical measurement objects.

Structure:
- common/     → configuration and numeric precision
- decoder/    → binary payload decoders
- domain/     → measurement objects, uplinks, device identity, sinks
- mqtt/       → MQTT transport and message handling
- resilience/ → retry with backoff
"""

__version__ = "0.1.0"
