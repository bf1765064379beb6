from sitecms.storage.interface import AssetStorage, make_stored_name
from sitecms.storage.filesystem import FilesystemStorage
from sitecms.storage.s3 import S3Storage
from sitecms.storage.factory import get_storage

__all__ = ["AssetStorage", "FilesystemStorage", "S3Storage", "get_storage", "make_stored_name"]
