"""CLI entry point for the IoT agent."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional

import orjson

from .common.config import Settings, get_settings
from .decoder import DecodeError, get_decoder
from .domain.device_management import create_device_management_client
from .domain.sink import LoggingSink
from .mqtt.client import MQTTAgentClient, TransportError
from .mqtt.message_handler import MessageHandler

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def run_agent(settings: Settings) -> int:
    decoder = get_decoder(settings.decoder)
    device_client = create_device_management_client(settings)
    handler = MessageHandler(decoder, device_client, LoggingSink())
    client = MQTTAgentClient(settings, handler.handle)

    logger.info("IoT agent started")
    logger.info(
        "Config: broker=%s:%d topic=%s decoder=%s tls=%s",
        settings.mqtt_host, settings.mqtt_port, settings.mqtt_topic, settings.decoder, settings.mqtt_tls,
    )

    try:
        client.start()
        client.wait()
    except TransportError as e:
        logger.error("Transport failure, shutting down: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        client.stop()
    finally:
        logger.info("[HANDLER] %s", handler.stats)
        device_client.close()

    return 0


def decode_once(args: argparse.Namespace) -> int:
    try:
        payload = bytes.fromhex(args.hex.replace(" ", ""))
    except ValueError as e:
        print(f"invalid hex payload: {e}", file=sys.stderr)
        return 2

    timestamp = (
        datetime.fromisoformat(args.timestamp.replace("Z", "+00:00"))
        if args.timestamp else datetime.now(timezone.utc)
    )

    decoder = get_decoder(args.decoder)
    try:
        objects = decoder(args.port, payload, args.device_id, timestamp)
    except DecodeError as e:
        print(f"decode failed: {e}", file=sys.stderr)
        return 2

    messages = [obj.to_message() for obj in objects]
    print(orjson.dumps(messages, option=orjson.OPT_INDENT_2).decode("utf-8"))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="iot-agent", description="Decode sensor uplinks into measurement objects")
    p.add_argument("--log-level", default=None, help="overrides LOG_LEVEL")
    sub = p.add_subparsers(dest="command")

    sub.add_parser("run", help="subscribe to the broker and decode uplinks (default)")

    d = sub.add_parser("decode", help="decode a single hex payload and print the objects")
    d.add_argument("--port", type=int, required=True)
    d.add_argument("--hex", required=True, help="payload bytes, e.g. 'A2 EB 00'")
    d.add_argument("--device-id", default="device")
    d.add_argument("--timestamp", default=None, help="ISO-8601 reading time (default: now)")
    d.add_argument("--decoder", default="axsensor")

    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    if args.command == "decode":
        return decode_once(args)

    return run_agent(settings)


if __name__ == "__main__":
    sys.exit(main())
