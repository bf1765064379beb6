"""Tests for the asset storage backends."""
import re
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from sitecms.config import Settings
from sitecms.storage import FilesystemStorage, S3Storage, get_storage, make_stored_name


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "operation")


class TestStoredNames:
    """Test generated file names."""

    def test_name_pattern(self):
        """Test names keep a sanitized base, a unique suffix and the lowercased extension."""
        name = make_stored_name("My Company Logo (final).PNG")

        assert re.fullmatch(r"My-Company-Logo--fin-\d+-\d+\.png", name)

    def test_names_are_unique(self):
        """Test two uploads of the same file get different names."""
        assert make_stored_name("a.png") != make_stored_name("a.png")


class TestFilesystemStorage:
    """Test local filesystem storage."""

    def test_save_and_read(self, upload_storage):
        """Test a saved file is readable by its URL."""
        url = upload_storage.save(b"content", "photo.png", "image/png", "images")

        assert url.startswith("/uploads/images/photo-")
        assert url.endswith(".png")
        assert upload_storage.read(url) == b"content"

    def test_documents_subfolder(self, upload_storage):
        """Test documents land in their own folder."""
        url = upload_storage.save(b"%PDF", "cv.pdf", "application/pdf", "documents")

        assert url.startswith("/uploads/documents/")
        assert (upload_storage.base_dir / upload_storage.key_for(url)).is_file()

    def test_delete(self, upload_storage):
        """Test deletion removes the file and reports success."""
        url = upload_storage.save(b"x", "a.png", "image/png", "images")

        assert upload_storage.delete(url) is True
        assert upload_storage.delete(url) is False
        with pytest.raises(FileNotFoundError):
            upload_storage.read(url)

    @pytest.mark.parametrize("url", [
        "/uploads/../secret.txt",
        "/uploads/images/../../secret.txt",
        "/elsewhere/a.png",
        "/uploads/",
    ])
    def test_paths_outside_upload_root(self, upload_storage, url):
        """Test traversal and foreign paths are never served or deleted."""
        with pytest.raises(FileNotFoundError):
            upload_storage.read(url)
        assert upload_storage.delete(url) is False

    def test_custom_prefix(self, tmp_path):
        """Test the URL prefix is normalized."""
        storage = FilesystemStorage(base_dir=str(tmp_path), url_prefix="media/")

        url = storage.save(b"x", "a.png", "image/png", "images")

        assert url.startswith("/media/images/")


class TestS3Storage:
    """Test S3 storage against a mocked boto3 client."""

    def test_existing_bucket_is_not_created(self):
        """Test no bucket is created when it already exists."""
        s3 = Mock()

        S3Storage("bucket", client=s3)

        s3.head_bucket.assert_called_once_with(Bucket="bucket")
        s3.create_bucket.assert_not_called()

    def test_missing_bucket_is_created(self):
        """Test a 404 on head_bucket creates the bucket."""
        s3 = Mock()
        s3.head_bucket.side_effect = client_error("404")

        S3Storage("bucket", client=s3)

        s3.create_bucket.assert_called_once_with(Bucket="bucket")

    def test_other_bucket_errors_propagate(self):
        """Test access errors are not hidden."""
        s3 = Mock()
        s3.head_bucket.side_effect = client_error("403")

        with pytest.raises(ClientError):
            S3Storage("bucket", client=s3)

    def test_save_puts_object_under_upload_key(self):
        """Test objects are keyed by their path below the upload root."""
        s3 = Mock()
        storage = S3Storage("bucket", client=s3)

        url = storage.save(b"data", "logo.svg", "image/svg+xml", "images")

        kwargs = s3.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "bucket"
        assert kwargs["Key"] == "uploads/" + url[len("/uploads/"):]
        assert kwargs["Body"] == b"data"
        assert kwargs["ContentType"] == "image/svg+xml"

    def test_read(self):
        """Test objects are read back by URL."""
        s3 = Mock()
        s3.get_object.return_value = {"Body": Mock(read=Mock(return_value=b"data"))}
        storage = S3Storage("bucket", client=s3)

        assert storage.read("/uploads/images/a.png") == b"data"
        s3.get_object.assert_called_once_with(Bucket="bucket", Key="uploads/images/a.png")

    def test_read_missing_object(self):
        """Test a missing key becomes FileNotFoundError."""
        s3 = Mock()
        s3.get_object.side_effect = client_error("NoSuchKey")
        storage = S3Storage("bucket", client=s3)

        with pytest.raises(FileNotFoundError):
            storage.read("/uploads/images/a.png")

    def test_delete_failure_returns_false(self):
        """Test delete errors are reported as False."""
        s3 = Mock()
        s3.delete_object.side_effect = client_error("AccessDenied")
        storage = S3Storage("bucket", client=s3)

        assert storage.delete("/uploads/images/a.png") is False


class TestStorageFactory:
    """Test backend selection from settings."""

    def test_filesystem_by_default(self, tmp_path):
        """Test the filesystem backend is the default."""
        storage = get_storage(Settings(STORAGE_TYPE="filesystem", UPLOAD_DIR=str(tmp_path)))

        assert isinstance(storage, FilesystemStorage)

    def test_s3_requires_bucket(self):
        """Test S3 storage without a bucket is a configuration error."""
        with pytest.raises(ValueError, match="S3_BUCKET"):
            get_storage(Settings(STORAGE_TYPE="s3", S3_BUCKET=""))
