"""
Test Configuration

Architecture:
- Unit tests (test/**/unit/): pure domain checks and use cases wired by hand
  against the in-memory adapters
- Environment variables are set before any application module is imported
  (settings and the loguru sinks read them at import time)
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ.setdefault('SERVICE_NAME', 'booking-service-test')
    os.environ.setdefault('DEPLOY_ENV', 'test')
    os.environ.setdefault('DEBUG', 'false')


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402

from src.platform.config import di  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line('markers', 'unit: pure unit tests without external services')


@pytest.fixture
def wired_container() -> Generator[di.Container, None, None]:
    """The application container with every use-case module wired"""
    di.setup()
    yield di.container
    di.cleanup()
