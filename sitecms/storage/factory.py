from sitecms.storage.interface import AssetStorage
from sitecms.storage.filesystem import FilesystemStorage
from sitecms.storage.s3 import S3Storage
from sitecms.config import Settings, settings as default_settings

def get_storage(settings: Settings = None) -> AssetStorage:
    """
    Factory function to create the appropriate storage implementation
    based on settings.

    Returns:
        A storage implementation (S3 or Filesystem)
    """
    settings = settings or default_settings
    storage_type = settings.STORAGE_TYPE.lower()

    if storage_type == "s3":
        if not settings.S3_BUCKET:
            raise ValueError("S3_BUCKET must be set when using S3 storage")

        return S3Storage(
            bucket_name=settings.S3_BUCKET,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=settings.AWS_REGION,
            url_prefix=settings.UPLOAD_URL_PREFIX,
        )

    return FilesystemStorage(base_dir=settings.UPLOAD_DIR, url_prefix=settings.UPLOAD_URL_PREFIX)
