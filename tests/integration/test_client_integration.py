"""Integration tests for IosenseClient with the real API."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pyiosense import IosenseClient, RetriesExhaustedError


pytestmark = [pytest.mark.integration]


class TestUserIntegration:
    """Integration tests for user profile endpoints."""

    async def test_get_user_details(self, client: IosenseClient) -> None:
        """Test that the token can read its own profile."""
        details = await client.users.get_user_details()

        assert details is not None
        assert details.get("success") is True


class TestDeviceIntegration:
    """Integration tests for device endpoints."""

    async def test_list_devices(self, client: IosenseClient) -> None:
        """Test that the device list is returned."""
        devices = await client.devices.get_all_devices()

        assert devices is not None
        assert devices.get("success") is True

    @pytest.mark.slow
    async def test_recent_data(self, client: IosenseClient, test_device_id: str | None) -> None:
        """Test fetching the last hour of data for a device."""
        if test_device_id is None:
            pytest.skip("Set IOSENSE_TEST_DEVICE_ID to run device data tests")

        end = datetime.now(UTC)
        data = await client.devices.get_data_by_time_range(test_device_id, end - timedelta(hours=1), end)

        assert data is not None


class TestErrorIntegration:
    """Integration tests for error surfacing."""

    @pytest.mark.slow
    async def test_unknown_endpoint_exhausts_retries(self, client: IosenseClient) -> None:
        """Test that a missing endpoint surfaces its status after retrying."""
        with pytest.raises(RetriesExhaustedError) as exc_info:
            await client.api.get("{protocol}://{backend_url}/api/account/definitely-not-an-endpoint")

        assert exc_info.value.status is not None
        assert exc_info.value.attempts == 3
