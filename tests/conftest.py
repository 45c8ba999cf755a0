"""
Shared pytest fixtures and configuration for the DropLink test suite.

This module provides:
- Hypothesis configuration for property-based testing
- A controllable clock
- In-memory store fixtures and a fully wired TransferService
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import HealthCheck, Phase, settings

from droplink.application.transfer_service import TransferService
from droplink.config.transfer_config import TransferConfig
from droplink.domain.file_storage import MetadataManager
from tests.fixtures.mock_repositories import InMemoryBlobStore, InMemoryMetadataStore

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.load_profile("default")


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# =============================================================================
# Time-related Fixtures
# =============================================================================

@pytest.fixture
def fixed_datetime() -> datetime:
    """Provide a fixed, timezone-aware datetime for deterministic testing."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_datetime) -> FakeClock:
    return FakeClock(fixed_datetime)


# =============================================================================
# Store and Service Fixtures
# =============================================================================

@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def metadata_store(clock) -> InMemoryMetadataStore:
    return InMemoryMetadataStore(clock=clock)


@pytest.fixture
def metadata_manager(metadata_store, clock) -> MetadataManager:
    return MetadataManager(metadata_store, clock=clock)


@pytest.fixture
def transfer_config() -> TransferConfig:
    return TransferConfig(
        max_upload_bytes=1024,
        one_time_downloads=True,
        short_links_enabled=True,
        default_expires_in_hours=None,
    )


@pytest.fixture
def transfer_service(blob_store, metadata_manager, transfer_config, clock) -> TransferService:
    return TransferService(blob_store, metadata_manager, transfer_config, clock=clock)


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "contract: Contract tests (verify interface compliance)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory: unit, integration, contracts, property."""
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/contracts/" in test_path or "\\contracts\\" in test_path:
            item.add_marker(pytest.mark.contract)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
