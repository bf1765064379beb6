from fastapi import APIRouter, Path, Depends, Request
from starlette.concurrency import run_in_threadpool

from sitecms.application.content_service import ContentService
from sitecms.dependencies import get_content_service, require_admin
from sitecms.rate_limit import upload_limit
from sitecms.schemas.api_schemas import Envelope
from sitecms.uploads.form_parser import read_submission

router = APIRouter(prefix="/content")


@router.get("", response_model=Envelope)
def get_all_content(service: ContentService = Depends(get_content_service)):
    """
    Retrieve every page section.
    """
    return Envelope(data=service.list_sections())


@router.get("/{section}", response_model=Envelope)
def get_section(
    section: str = Path(..., title="Section name, e.g. hero or about"),
    service: ContentService = Depends(get_content_service),
):
    return Envelope(data=service.get_section(section))


@router.put("/{section}", response_model=Envelope)
@upload_limit("update_section")
async def update_section(
    request: Request,
    section: str = Path(..., title="Section name, e.g. hero or about"),
    service: ContentService = Depends(get_content_service),
    _: str = Depends(require_admin),
):
    """
    Create or update a page section from a multipart form.
    """
    submission = await read_submission(request)
    content = await run_in_threadpool(service.upsert_section, section, submission.fields, submission.files)
    return Envelope(data=content, message="Content updated successfully")
