"""
Unit test fixtures: fakes for the origin, the blob store and the converters.
"""

import pytest

from tests.factories.pipeline_factories import (
    FakeOrigin,
    InMemoryBlobRepository,
    make_app_config,
    make_converters,
    make_pipeline,
    make_zip_bytes,
)


@pytest.fixture
def app_config(tmp_path):
    """AppConfig staging under tmp_path."""
    return make_app_config(staging_dir=str(tmp_path))


@pytest.fixture
def origin(last_modified):
    """Origin serving a valid archive with prism.mdb."""
    return FakeOrigin(make_zip_bytes(), last_modified=last_modified)


@pytest.fixture
def repository():
    """Empty in-memory container."""
    return InMemoryBlobRepository()


@pytest.fixture
def converters():
    return make_converters()


@pytest.fixture
def pipeline(tmp_path, origin, repository, converters):
    return make_pipeline(tmp_path, origin=origin, repository=repository, converters=converters)
