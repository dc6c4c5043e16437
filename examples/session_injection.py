"""Example showing session injection for applications that own their aiohttp session."""

import asyncio

from aiohttp import ClientSession

from pyiosense import IosenseClient


async def main() -> None:
    """Share one application-managed session between two clients."""
    async with ClientSession() as session:
        print("Using application-managed aiohttp session")

        cloud = IosenseClient("appserver.iosense.io", "cloud_token", session=session)
        on_prem = IosenseClient("10.0.0.12:8080", "plant_token", on_prem=True, session=session)

        async with cloud, on_prem:
            cloud_devices, plant_devices = await asyncio.gather(
                cloud.devices.get_all_devices(),
                on_prem.devices.get_all_devices(),
            )
            print(f"Cloud: {cloud_devices is not None}, plant: {plant_devices is not None}")

        # Session remains open after the clients exit
        print("\nClients closed, but session still available for other requests")


if __name__ == "__main__":
    asyncio.run(main())
