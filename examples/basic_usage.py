"""Basic usage example for pyiosense library."""

import asyncio
from datetime import UTC, datetime, timedelta

from pyiosense import IosenseClient


async def main() -> None:
    """Demonstrate basic usage of pyiosense."""
    async with IosenseClient(
        backend_host="appserver.iosense.io",
        access_token="your_access_token",
        timezone="Asia/Kolkata",
    ) as client:
        details = await client.users.get_user_details()
        if details is None:
            print("Could not load user details")
            return
        print(f"Logged in as {details.get('data', {}).get('email')}")

        # Device calls return None when every retry failed
        devices = await client.devices.get_all_devices_paginated(limit=5)
        if devices is None:
            print("Could not list devices")
            return

        for device in devices.get("data", []):
            dev_id = device.get("devID")
            print(f"\nDevice: {device.get('devName')} ({dev_id})")

            last = await client.devices.get_limited_data(dev_id, 1)
            print(f"  Last reading: {last}")

            end = datetime.now(UTC)
            data = await client.devices.get_data_by_time_range(dev_id, end - timedelta(hours=1), end)
            print(f"  Points in the last hour: {len((data or {}).get('data', []))}")


if __name__ == "__main__":
    asyncio.run(main())
