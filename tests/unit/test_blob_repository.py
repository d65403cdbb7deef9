"""
BlobRepository tests against a mocked BlobServiceClient.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock, patch
import io

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError, ServiceRequestError

from config import AppConfig, StorageConfig
from exceptions import StoreError
from infrastructure.blob import BlobRepository
from infrastructure.factory import RepositoryFactory


def make_properties(size=4, content_type="application/json"):
    return SimpleNamespace(
        size=size,
        etag='"0x8DC0000000000001"',
        last_modified=datetime(2030, 1, 1, 0, 5, tzinfo=timezone.utc),
        content_settings=SimpleNamespace(content_type=content_type),
    )


@pytest.fixture
def storage():
    return StorageConfig(account_name="teststorage", connection_string=None, container="nz-wireless-map")


@pytest.fixture
def blob_service():
    service = MagicMock()
    service.account_name = "teststorage"
    return service


@pytest.fixture
def blob_client(blob_service):
    return blob_service.get_container_client.return_value.get_blob_client.return_value


@pytest.fixture
def repo(storage, blob_service):
    return BlobRepository(storage, blob_service=blob_service)


class TestBlobExists:

    def test_existing_blob(self, repo, blob_service, blob_client):
        blob_client.get_blob_properties.return_value = make_properties()
        assert repo.blob_exists("prism.json/2030-01-01T00:00:00Z") is True
        blob_service.get_container_client.assert_called_once_with("nz-wireless-map")
        blob_service.get_container_client.return_value.get_blob_client.assert_called_with(
            "prism.json/2030-01-01T00:00:00Z"
        )

    def test_missing_blob_is_false(self, repo, blob_client):
        blob_client.get_blob_properties.side_effect = ResourceNotFoundError("The specified blob does not exist.")
        assert repo.blob_exists("prism.json/2030-01-01T00:00:00Z") is False

    @pytest.mark.parametrize("error", [
        HttpResponseError(message="Server failed to authenticate the request."),
        ServiceRequestError("Connection refused"),
    ])
    def test_backend_failure_raises(self, repo, blob_client, error):
        blob_client.get_blob_properties.side_effect = error
        with pytest.raises(StoreError, match="error checking nz-wireless-map/prism.json") as exc_info:
            repo.blob_exists("prism.json/2030-01-01T00:00:00Z")
        assert exc_info.value.__cause__ is error


class TestWriteBlob:

    def test_block_blob_overwrite_with_content_type(self, repo, blob_client):
        blob_client.get_blob_properties.return_value = make_properties(size=4)
        stream = io.BytesIO(b"[{}]")

        attributes = repo.write_blob("prism.json/latest", stream, "application/json")

        args, kwargs = blob_client.upload_blob.call_args
        assert args[0] is stream
        assert kwargs["blob_type"] == "BlockBlob"
        assert kwargs["overwrite"] is True
        assert kwargs["content_settings"].content_type == "application/json"

        assert attributes.name == "prism.json/latest"
        assert attributes.container == "nz-wireless-map"
        assert attributes.size == 4
        assert attributes.etag == '"0x8DC0000000000001"'
        assert attributes.content_type == "application/json"

    def test_upload_failure(self, repo, blob_client):
        blob_client.upload_blob.side_effect = ServiceRequestError("Connection reset by peer")
        with pytest.raises(StoreError, match="error writing to blob storage nz-wireless-map/prism.zip"):
            repo.write_blob("prism.zip/2030-01-01T00:00:00Z", io.BytesIO(b"PK"), "application/zip")


class TestGetBlobAttributes:

    def test_existing(self, repo, blob_client):
        blob_client.get_blob_properties.return_value = make_properties(size=12, content_type="text/csv")
        attributes = repo.get_blob_attributes("prism.csv/2030-01-01T00:00:00Z")
        assert attributes.size == 12
        assert attributes.content_type == "text/csv"

    def test_missing_is_store_error(self, repo, blob_client):
        blob_client.get_blob_properties.side_effect = ResourceNotFoundError("gone")
        with pytest.raises(StoreError, match="blob not found"):
            repo.get_blob_attributes("prism.csv/2030-01-01T00:00:00Z")


class TestConstruction:

    def test_connection_string_cached_per_container(self):
        storage = StorageConfig(connection_string="UseDevelopmentStorage=true", container="nz-wireless-map")
        with patch("infrastructure.blob.BlobServiceClient") as client_cls:
            first = BlobRepository.instance(storage)
            second = BlobRepository.instance(storage)

        assert first is second
        client_cls.from_connection_string.assert_called_once_with("UseDevelopmentStorage=true")

    def test_default_credential_used_without_connection_string(self, storage):
        with patch("infrastructure.blob.DefaultAzureCredential") as credential_cls, \
                patch("infrastructure.blob.BlobServiceClient") as client_cls:
            BlobRepository(storage)

        client_cls.assert_called_once_with(
            account_url="https://teststorage.blob.core.windows.net",
            credential=credential_cls.return_value,
        )

    def test_malformed_connection_string(self):
        storage = StorageConfig(connection_string="AccountName=broken", container="nz-wireless-map")
        with patch("infrastructure.blob.BlobServiceClient") as client_cls:
            client_cls.from_connection_string.side_effect = ValueError("Connection string is either blank or malformed.")
            with pytest.raises(StoreError, match="couldn't create storage client"):
                BlobRepository(storage)

    def test_factory_uses_cached_instance(self, blob_service):
        config = AppConfig(storage=StorageConfig(connection_string="UseDevelopmentStorage=true"))
        with patch("infrastructure.blob.BlobServiceClient") as client_cls:
            client_cls.from_connection_string.return_value = blob_service
            repo = RepositoryFactory.create_blob_repository(config)
            assert RepositoryFactory.create_blob_repository(config) is repo
        assert repo.container == "nz-wireless-map"
