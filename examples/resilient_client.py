"""Retry, cancellation and login example.

This example demonstrates:
- Logging in to obtain an access token
- A custom retry policy that fails fast on client errors
- Deadlines and cancel events for long-running calls
- Raw transport calls, which raise instead of returning None

Credentials are read from a .env file:

    IOSENSE_BACKEND_HOST=appserver.iosense.io
    IOSENSE_USERNAME=user@example.com
    IOSENSE_PASSWORD=secret
    IOSENSE_ORGANISATION=https://iosense.io
"""

import asyncio
import logging
import os

from dotenv import load_dotenv

from pyiosense import (
    AuthenticationError,
    IosenseClient,
    RequestCancelledError,
    RetriesExhaustedError,
    RetryPolicy,
)
from pyiosense.const import INSIGHT_USER_FETCH_PAGINATED_URL


logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


async def main() -> None:
    """Main example function with retry configuration."""
    load_dotenv()
    host = os.getenv("IOSENSE_BACKEND_HOST", "appserver.iosense.io")
    organisation = os.getenv("IOSENSE_ORGANISATION", "https://iosense.io")

    async with IosenseClient(host, "") as anonymous:
        try:
            login = await anonymous.login(
                os.getenv("IOSENSE_USERNAME", ""),
                os.getenv("IOSENSE_PASSWORD", ""),
                organisation=organisation,
                origin=organisation,
            )
        except AuthenticationError as err:
            print(f"Login failed: {err}")
            return

    policy = RetryPolicy(max_attempts=5, base_delay=0.5, max_delay=4.0, retry_client_errors=False)

    async with IosenseClient(host, login.authorization, retry_policy=policy) as client:
        try:
            insights = await client.api.put(
                INSIGHT_USER_FETCH_PAGINATED_URL,
                {"pagination": {"page": 1, "count": 10}},
                deadline=10.0,
            )
            print(f"Insights: {insights}")
        except RetriesExhaustedError as err:
            print(f"Gave up after {err.attempts} attempt(s), last status {err.status}")
        except RequestCancelledError:
            print("Insight fetch exceeded its deadline")

        cancel = asyncio.Event()
        task = asyncio.create_task(
            client.api.get("{protocol}://{backend_url}/api/account/devices", cancel_event=cancel)
        )
        await asyncio.sleep(0.1)
        cancel.set()
        try:
            await task
        except RequestCancelledError as err:
            print(f"Cancelled: {err}")


if __name__ == "__main__":
    asyncio.run(main())
