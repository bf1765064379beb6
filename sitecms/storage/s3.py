import logging

import boto3
from botocore.exceptions import ClientError

from sitecms.storage.interface import AssetStorage, make_stored_name

logger = logging.getLogger(__name__)


class S3Storage(AssetStorage):
    """
    Implements asset storage using AWS S3.

    Objects are keyed by their path below the upload root, so the stored
    URL ``/uploads/images/a.png`` lives at ``uploads/images/a.png`` in the bucket.
    """

    def __init__(self, bucket_name: str, aws_access_key_id: str = None,
                 aws_secret_access_key: str = None, region_name: str = None,
                 url_prefix: str = "/uploads", client=None):
        """
        Initialize S3 storage.

        Args:
            bucket_name: S3 bucket name
            aws_access_key_id: AWS access key ID (if None, uses environment variables)
            aws_secret_access_key: AWS secret access key (if None, uses environment variables)
            region_name: AWS region name (if None, uses environment variables)
            url_prefix: URL path the files are served under
            client: Preconfigured boto3 S3 client
        """
        super().__init__(url_prefix)
        self.bucket_name = bucket_name

        # If credentials are not provided, boto3 will look for them in environment variables
        self.s3_client = client or boto3.client(
            's3',
            aws_access_key_id=aws_access_key_id or None,
            aws_secret_access_key=aws_secret_access_key or None,
            region_name=region_name
        )

        # Ensure bucket exists
        self._ensure_bucket_exists()

    def _ensure_bucket_exists(self):
        """Ensure the S3 bucket exists, create it if it doesn't."""
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            if error_code == '404':
                # Bucket doesn't exist, create it
                self.s3_client.create_bucket(Bucket=self.bucket_name)
            else:
                # Another error occurred
                raise

    def _object_key(self, key: str) -> str:
        return f"{self.url_prefix.strip('/')}/{key}"

    def save(self, data: bytes, filename: str, content_type: str, subdir: str) -> str:
        """
        Upload a file to S3.

        Returns:
            URL path where the file is served
        """
        key = f"{subdir}/{make_stored_name(filename)}"
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=self._object_key(key),
            Body=data,
            ContentType=content_type or "application/octet-stream",
        )
        logger.info(f"Uploaded {filename} to s3://{self.bucket_name}/{self._object_key(key)}")
        return self.url_for(key)

    def read(self, url: str) -> bytes:
        try:
            key = self.key_for(url)
        except ValueError as exc:
            raise FileNotFoundError(str(exc)) from exc

        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=self._object_key(key))
            return response['Body'].read()
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('NoSuchKey', '404'):
                raise FileNotFoundError(f"Upload not found at path: {url}")
            raise

    def delete(self, url: str) -> bool:
        """
        Delete an uploaded file from S3.

        Returns:
            True if successfully deleted, False otherwise
        """
        try:
            key = self.key_for(url)
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=self._object_key(key))
            return True
        except (ClientError, ValueError) as exc:
            logger.warning(f"Could not delete {url}: {exc}")
            return False
