import mimetypes

from fastapi import APIRouter, Depends, Path
from fastapi.responses import Response

from sitecms.config import settings
from sitecms.dependencies import get_asset_storage
from sitecms.domain.errors import NotFoundError
from sitecms.storage.interface import AssetStorage

router = APIRouter()


@router.get(settings.UPLOAD_URL_PREFIX.rstrip("/") + "/{file_path:path}")
def get_upload(
    file_path: str = Path(..., title="Path of the file below the upload root"),
    storage: AssetStorage = Depends(get_asset_storage),
):
    """
    Serve an uploaded file from the configured storage backend.
    """
    url = f"{storage.url_prefix}/{file_path}"
    try:
        data = storage.read(url)
    except FileNotFoundError:
        raise NotFoundError(f"File not found: {url}") from None

    media_type = mimetypes.guess_type(file_path)[0] or "application/octet-stream"
    return Response(content=data, media_type=media_type, headers={"Cache-Control": "public, max-age=86400"})
