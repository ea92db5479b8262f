"""Tests for device identity resolution."""

import httpx
import pytest

from iot_agent.domain.device_management import (
    DEFAULT_RESULT,
    DeviceLookupError,
    DeviceResult,
    HttpDeviceManagementClient,
    StaticDeviceManagementClient,
    create_device_management_client,
)

DEV_EUI = "70b3d5e75e003f2a"


def _http_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


# =============================================================================
# STATIC CLIENT
# =============================================================================

class TestStaticClient:

    def test_default_result(self):
        client = StaticDeviceManagementClient()

        result = client.find_device_from_dev_eui(DEV_EUI)

        assert result.internal_id == "internalID"
        assert result.types == ["urn:oma:lwm2m:ext:3303"]

    def test_mapping_is_case_insensitive(self):
        device = DeviceResult("level-01", ["urn:oma:lwm2m:ext:3435"])
        client = StaticDeviceManagementClient({DEV_EUI.upper(): device})

        assert client.find_device_from_dev_eui(DEV_EUI) is device

    def test_unknown_without_default(self):
        client = StaticDeviceManagementClient(default=None)

        with pytest.raises(DeviceLookupError) as exc_info:
            client.find_device_from_dev_eui(DEV_EUI)

        assert exc_info.value.dev_eui == DEV_EUI


# =============================================================================
# HTTP CLIENT
# =============================================================================

class TestHttpClient:

    def test_resolves_device(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"internalID": "level-01", "types": ["urn:oma:lwm2m:ext:3435"]})

        client = HttpDeviceManagementClient("http://dev-mgmt/api/v0/devices/", client=_http_client(handler))

        result = client.find_device_from_dev_eui(DEV_EUI)

        assert result == DeviceResult("level-01", ["urn:oma:lwm2m:ext:3435"])
        assert seen[0].method == "GET"
        assert seen[0].url.path == f"/api/v0/devices/{DEV_EUI}"

    def test_non_ok_status(self):
        client = HttpDeviceManagementClient(
            "http://dev-mgmt",
            client=_http_client(lambda request: httpx.Response(404)),
        )

        with pytest.raises(DeviceLookupError) as exc_info:
            client.find_device_from_dev_eui(DEV_EUI)

        assert "404" in exc_info.value.reason

    def test_malformed_body(self):
        client = HttpDeviceManagementClient(
            "http://dev-mgmt",
            client=_http_client(lambda request: httpx.Response(200, content=b"not json")),
        )

        with pytest.raises(DeviceLookupError) as exc_info:
            client.find_device_from_dev_eui(DEV_EUI)

        assert "malformed" in exc_info.value.reason

    def test_missing_internal_id(self):
        client = HttpDeviceManagementClient(
            "http://dev-mgmt",
            client=_http_client(lambda request: httpx.Response(200, json={"types": []})),
        )

        with pytest.raises(DeviceLookupError):
            client.find_device_from_dev_eui(DEV_EUI)

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = HttpDeviceManagementClient("http://dev-mgmt", client=_http_client(handler))

        with pytest.raises(DeviceLookupError) as exc_info:
            client.find_device_from_dev_eui(DEV_EUI)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


# =============================================================================
# FACTORY / RESULT
# =============================================================================

class TestFactory:

    def test_static_without_url(self, make_settings):
        client = create_device_management_client(make_settings(dev_mgmt_url=""))

        assert isinstance(client, StaticDeviceManagementClient)

    def test_http_with_url(self, make_settings):
        client = create_device_management_client(make_settings(dev_mgmt_url="http://dev-mgmt/"))

        try:
            assert isinstance(client, HttpDeviceManagementClient)
            assert client.url == "http://dev-mgmt"
        finally:
            client.close()

    def test_result_round_trip(self):
        assert DeviceResult.from_dict(DEFAULT_RESULT.to_dict()) == DEFAULT_RESULT
