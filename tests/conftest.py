"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without Azure credentials, the origin server or the converter toolchain.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'config', 'services', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables to prevent import crashes.

    function_app.py and docker_service.py build their triggers at import
    time. We provide safe defaults so imports succeed without Azure
    infrastructure.
    """
    defaults = {
        "STORAGE_ACCOUNT_NAME": "teststorage",
        "PRISM_ZIP_URL": "https://origin.test/assets/prism.zip",
        "ENVIRONMENT": "test",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop the cached config and blob repositories between tests."""
    from config import reset_config
    from infrastructure.blob import BlobRepository

    reset_config()
    BlobRepository.reset_instances()
    yield
    reset_config()
    BlobRepository.reset_instances()


@pytest.fixture
def last_modified():
    """Last-Modified header value served by the fake origin."""
    return "Tue, 01 Jan 2030 00:00:00 GMT"
