from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from sitecms.application.customization_service import CustomizationService
from sitecms.dependencies import get_customization_service, require_admin
from sitecms.rate_limit import upload_limit
from sitecms.schemas.api_schemas import Envelope
from sitecms.uploads.form_parser import read_submission

router = APIRouter(prefix="/customizations")


@router.get("", response_model=Envelope)
def get_customization(service: CustomizationService = Depends(get_customization_service)):
    """
    Retrieve the site customization, creating the defaults on first use.
    """
    return Envelope(data=service.get())


@router.get("/fonts", response_model=Envelope)
def get_available_fonts():
    return Envelope(data=CustomizationService.fonts())


@router.put("", response_model=Envelope)
@upload_limit("update_customization")
async def update_customization(
    request: Request,
    service: CustomizationService = Depends(get_customization_service),
    _: str = Depends(require_admin),
):
    """
    Update the site customization; accepts logo, favicon and backgroundImage uploads.
    """
    submission = await read_submission(request)
    customization = await run_in_threadpool(service.update, submission.fields, submission.files)
    return Envelope(data=customization, message="Customization updated successfully")


@router.post("/reset", response_model=Envelope)
def reset_customization(
    service: CustomizationService = Depends(get_customization_service),
    _: str = Depends(require_admin),
):
    return Envelope(data=service.reset(), message="Customization reset to defaults")
