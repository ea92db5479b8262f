from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _default_env_file() -> str:
    return str(Path.cwd() / ".env")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    mqtt_host: str
    mqtt_port: int
    mqtt_user: str
    mqtt_password: str
    mqtt_topic: str
    mqtt_qos: int
    mqtt_tls: bool
    mqtt_tls_insecure: bool
    mqtt_client_id_prefix: str

    dev_mgmt_url: str
    dev_mgmt_timeout_seconds: float

    decoder: str

    reconnect_max_attempts: int
    reconnect_base_delay: float
    reconnect_max_delay: float

    log_level: str


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("IOT_AGENT_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    mqtt_host = os.getenv("MQTT_HOST", "localhost")
    mqtt_port = int(os.getenv("MQTT_PORT", "8883"))
    mqtt_user = os.getenv("MQTT_USER", "")
    mqtt_password = os.getenv("MQTT_PASSWORD", "")

    # ChirpStack publishes uplinks on application/<id>/device/<devEUI>/rx
    mqtt_topic = os.getenv("MQTT_TOPIC", "application/53/device/#")
    mqtt_qos = int(os.getenv("MQTT_QOS", "0"))

    mqtt_tls = _env_bool("MQTT_TLS", "true")
    mqtt_tls_insecure = _env_bool("MQTT_TLS_INSECURE", "true")
    mqtt_client_id_prefix = os.getenv("MQTT_CLIENT_ID_PREFIX", "diwise/iot-agent")

    # Empty URL selects the static device management stub.
    dev_mgmt_url = os.getenv("DEV_MGMT_URL", "").strip()
    dev_mgmt_timeout_seconds = float(os.getenv("DEV_MGMT_TIMEOUT_SECONDS", "5"))

    decoder = os.getenv("DECODER", "axsensor").strip().lower()

    reconnect_max_attempts = int(os.getenv("RECONNECT_MAX_ATTEMPTS", "10"))
    reconnect_base_delay = float(os.getenv("RECONNECT_BASE_DELAY", "1.0"))
    reconnect_max_delay = float(os.getenv("RECONNECT_MAX_DELAY", "60.0"))

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    return Settings(
        mqtt_host=mqtt_host,
        mqtt_port=mqtt_port,
        mqtt_user=mqtt_user,
        mqtt_password=mqtt_password,
        mqtt_topic=mqtt_topic,
        mqtt_qos=mqtt_qos,
        mqtt_tls=mqtt_tls,
        mqtt_tls_insecure=mqtt_tls_insecure,
        mqtt_client_id_prefix=mqtt_client_id_prefix,
        dev_mgmt_url=dev_mgmt_url,
        dev_mgmt_timeout_seconds=dev_mgmt_timeout_seconds,
        decoder=decoder,
        reconnect_max_attempts=reconnect_max_attempts,
        reconnect_base_delay=reconnect_base_delay,
        reconnect_max_delay=reconnect_max_delay,
        log_level=log_level,
    )
