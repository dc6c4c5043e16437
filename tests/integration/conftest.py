"""Pytest configuration and fixtures for integration tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from dotenv import load_dotenv

from pyiosense import IosenseClient, RetryPolicy


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


# Load .env file from project root
env_path = Path(__file__).parents[2] / ".env"
load_dotenv(env_path)


@pytest.fixture(scope="session")
def integration_config() -> dict[str, str]:
    """Load integration test configuration from environment.

    Tests using this fixture are skipped unless IOSENSE_BACKEND_HOST and
    IOSENSE_ACCESS_TOKEN are set, either in the environment or in .env.

    Returns:
        Dictionary with API credentials and configuration.
    """
    backend_host = os.getenv("IOSENSE_BACKEND_HOST")
    access_token = os.getenv("IOSENSE_ACCESS_TOKEN")

    if not backend_host or not access_token:
        pytest.skip("Create a .env file with IOSENSE_BACKEND_HOST and IOSENSE_ACCESS_TOKEN to run integration tests")

    return {
        "backend_host": backend_host,
        "access_token": access_token,
        "on_prem": os.getenv("IOSENSE_ON_PREM", "false"),
        "timezone": os.getenv("IOSENSE_TIMEZONE", "UTC"),
    }


@pytest.fixture(scope="session")
def test_device_id() -> str | None:
    """Get test device ID from environment if available.

    Returns:
        Device ID for testing, or None to use the first listed device.
    """
    return os.getenv("IOSENSE_TEST_DEVICE_ID")


@pytest.fixture
async def client(integration_config: dict[str, str]) -> AsyncGenerator[IosenseClient]:
    """Create a client against the real backend with a short retry policy."""
    client = IosenseClient(
        integration_config["backend_host"],
        integration_config["access_token"],
        on_prem=integration_config["on_prem"].lower() == "true",
        timezone=integration_config["timezone"],
        retry_policy=RetryPolicy(max_attempts=3),
    )

    async with client:
        yield client


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for integration tests."""
    config.addinivalue_line("markers", "integration: Integration tests requiring real API access")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")
