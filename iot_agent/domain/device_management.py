"""Device identity resolution.

Resolves the devEUI of an uplink to the internal device identifier and the
object types the device supports. The decoders never depend on this module;
the message handler resolves identity before decoding.

Implementations:
- StaticDeviceManagementClient: fixed/in-memory results (stub and tests)
- HttpDeviceManagementClient: device management service over HTTP
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..common.config import Settings

logger = logging.getLogger(__name__)


class DeviceLookupError(Exception):
    """Device identity could not be resolved."""

    def __init__(self, dev_eui: str, reason: str):
        self.dev_eui = dev_eui
        self.reason = reason
        super().__init__(f"device lookup failed for {dev_eui}: {reason}")


@dataclass
class DeviceResult:
    """Identity of a device as known by device management."""
    internal_id: str
    types: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeviceResult":
        internal_id = data.get("internalID")
        if not isinstance(internal_id, str) or not internal_id:
            raise ValueError("internalID missing or not a string")
        types = data.get("types") or []
        if not isinstance(types, list):
            raise ValueError("types must be a list")
        return cls(internal_id=internal_id, types=[str(t) for t in types])

    def to_dict(self) -> Dict[str, Any]:
        return {"internalID": self.internal_id, "types": list(self.types)}


class DeviceManagementClient(ABC):
    """Capability interface for device identity lookup."""

    @abstractmethod
    def find_device_from_dev_eui(self, dev_eui: str) -> DeviceResult:
        """Resolve a devEUI.

        Raises:
            DeviceLookupError: the device could not be resolved
        """
        pass

    def close(self) -> None:
        """Release resources held by the client."""


DEFAULT_RESULT = DeviceResult(internal_id="internalID", types=["urn:oma:lwm2m:ext:3303"])


class StaticDeviceManagementClient(DeviceManagementClient):
    """Answers from a fixed mapping, falling back to a default result.

    Stands in for device management until the service exists.
    """

    def __init__(
        self,
        devices: Optional[Dict[str, DeviceResult]] = None,
        default: Optional[DeviceResult] = DEFAULT_RESULT,
    ):
        self._devices = {k.lower(): v for k, v in (devices or {}).items()}
        self._default = default

    def find_device_from_dev_eui(self, dev_eui: str) -> DeviceResult:
        result = self._devices.get(dev_eui.lower(), self._default)
        if result is None:
            raise DeviceLookupError(dev_eui, "unknown device")
        return result


class HttpDeviceManagementClient(DeviceManagementClient):
    """Looks devices up with ``GET {url}/{devEUI}``."""

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        self.url = url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    def find_device_from_dev_eui(self, dev_eui: str) -> DeviceResult:
        endpoint = f"{self.url}/{dev_eui}"

        try:
            resp = self._client.get(endpoint)
        except httpx.HTTPError as e:
            logger.error("[DEVICE_MGMT] failed to retrieve device information from devEUI: %s", e)
            raise DeviceLookupError(dev_eui, str(e)) from e

        if resp.status_code != httpx.codes.OK:
            logger.error("[DEVICE_MGMT] request failed with status code %d", resp.status_code)
            raise DeviceLookupError(dev_eui, f"status code {resp.status_code}")

        try:
            return DeviceResult.from_dict(resp.json())
        except (ValueError, AttributeError) as e:
            logger.error("[DEVICE_MGMT] failed to unmarshal response body: %s", e)
            raise DeviceLookupError(dev_eui, f"malformed response: {e}") from e

    def close(self) -> None:
        self._client.close()


def create_device_management_client(settings: Settings) -> DeviceManagementClient:
    """HTTP client when DEV_MGMT_URL is configured, static stub otherwise."""
    if settings.dev_mgmt_url:
        logger.info("[DEVICE_MGMT] Using device management at %s", settings.dev_mgmt_url)
        return HttpDeviceManagementClient(
            settings.dev_mgmt_url,
            timeout=settings.dev_mgmt_timeout_seconds,
        )

    logger.info("[DEVICE_MGMT] DEV_MGMT_URL not set - using static device identities")
    return StaticDeviceManagementClient()
