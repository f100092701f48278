from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from cvoptima.storage.exceptions import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStoreConfigurationError,
    BlobStoreError,
    BlobStorePermissionError,
    BlobStoreUnavailableError,
)
from cvoptima.storage.s3_adapter import S3BlobStore


def _client_error(code: str, operation: str = "PutObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def _make_store(public_base_url: str = "") -> tuple[S3BlobStore, MagicMock]:
    client = MagicMock()
    client.head_object.side_effect = _client_error("404", "HeadObject")
    return S3BlobStore("resumes", client=client, public_base_url=public_base_url), client


class TestS3BlobStoreConstruction:
    def test_requires_bucket(self) -> None:
        with pytest.raises(BlobStoreConfigurationError):
            S3BlobStore("  ", client=MagicMock())

    def test_requires_credentials_without_client(self) -> None:
        with pytest.raises(BlobStoreConfigurationError):
            S3BlobStore("resumes")

    @patch("cvoptima.storage.s3_adapter.boto3.client")
    def test_builds_boto3_client(self, mock_client: MagicMock) -> None:
        S3BlobStore(
            "resumes",
            access_key="key",
            secret_key="secret",
            endpoint_url="http://minio:9000",
        )
        mock_client.assert_called_once_with(
            "s3",
            aws_access_key_id="key",
            aws_secret_access_key="secret",
            region_name=None,
            endpoint_url="http://minio:9000",
        )


class TestS3BlobStore:
    def test_put_uploads_object(self) -> None:
        store, client = _make_store()
        blob = store.put("u/cv.pdf", b"%PDF-", "application/pdf")
        client.put_object.assert_called_once_with(
            Bucket="resumes", Key="u/cv.pdf", Body=b"%PDF-", ContentType="application/pdf"
        )
        assert blob.locator == "s3://resumes/u/cv.pdf"

    def test_put_public_locator(self) -> None:
        store, _client = _make_store(public_base_url="https://cdn.example.com")
        assert store.put("u/cv.pdf", b"x").locator == "https://cdn.example.com/u/cv.pdf"

    def test_put_refuses_existing_key(self) -> None:
        store, client = _make_store()
        client.head_object.side_effect = None
        with pytest.raises(BlobAlreadyExistsError):
            store.put("u/cv.pdf", b"x")
        client.put_object.assert_not_called()

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            ("AccessDenied", BlobStorePermissionError),
            ("SlowDown", BlobStoreUnavailableError),
            ("InternalError", BlobStoreError),
        ],
    )
    def test_put_maps_client_errors(self, code: str, expected: type[BlobStoreError]) -> None:
        store, client = _make_store()
        client.put_object.side_effect = _client_error(code)
        with pytest.raises(expected):
            store.put("u/cv.pdf", b"x")

    def test_connection_error_is_unavailable(self) -> None:
        store, client = _make_store()
        client.put_object.side_effect = EndpointConnectionError(endpoint_url="http://minio:9000")
        with pytest.raises(BlobStoreUnavailableError):
            store.put("u/cv.pdf", b"x")

    def test_get_reads_body(self) -> None:
        store, client = _make_store()
        body = MagicMock()
        body.read.return_value = b"content"
        client.get_object.return_value = {"Body": body}
        assert store.get("u/cv.pdf") == b"content"

    def test_get_missing(self) -> None:
        store, client = _make_store()
        client.get_object.side_effect = _client_error("NoSuchKey", "GetObject")
        with pytest.raises(BlobNotFoundError):
            store.get("u/cv.pdf")

    def test_delete(self) -> None:
        store, client = _make_store()
        store.delete("u/cv.pdf")
        client.delete_object.assert_called_once_with(Bucket="resumes", Key="u/cv.pdf")

    def test_exists(self) -> None:
        store, client = _make_store()
        assert not store.exists("u/cv.pdf")
        client.head_object.side_effect = None
        assert store.exists("u/cv.pdf")

    def test_exists_propagates_other_errors(self) -> None:
        store, client = _make_store()
        client.head_object.side_effect = _client_error("AccessDenied", "HeadObject")
        with pytest.raises(BlobStorePermissionError):
            store.exists("u/cv.pdf")

    def test_list_paths_walks_pages(self) -> None:
        store, client = _make_store()
        client.get_paginator.return_value.paginate.return_value = [
            {"Contents": [{"Key": "b/2.pdf"}, {"Key": "a/1.pdf"}]},
            {},
        ]
        assert store.list_paths("") == ["a/1.pdf", "b/2.pdf"]
        client.get_paginator.assert_called_once_with("list_objects_v2")
