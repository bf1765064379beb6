from fastapi import APIRouter, Path, Depends, Query, Request
from typing import Optional

from sitecms.application.contact_service import ContactService
from sitecms.dependencies import get_contact_service, require_admin
from sitecms.rate_limit import contact_limit
from sitecms.schemas.api_schemas import ContactStatusUpdate, ContactSubmission, Envelope

router = APIRouter(prefix="/contact")


@router.post("", response_model=Envelope, status_code=201)
@contact_limit
def submit_contact(
    request: Request,
    submission: ContactSubmission,
    service: ContactService = Depends(get_contact_service),
):
    """
    Public contact form, rate limited per client address.
    """
    values = submission.model_dump(exclude_none=True)
    contact = service.submit(values)
    return Envelope(
        data={"id": contact["id"], "name": contact["name"], "email": contact["email"]},
        message="Message sent successfully! We'll get back to you soon.",
    )


@router.get("", response_model=Envelope)
def get_contacts(
    status: Optional[str] = Query(None, description="Only messages with this status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: ContactService = Depends(get_contact_service),
    _: str = Depends(require_admin),
):
    result = service.list({"status": status}, page=page, limit=limit)
    return Envelope(data=result["items"], pagination=result["pagination"])


@router.get("/stats", response_model=Envelope)
def get_contact_stats(
    service: ContactService = Depends(get_contact_service),
    _: str = Depends(require_admin),
):
    return Envelope(data=service.stats())


@router.get("/{contact_id}", response_model=Envelope)
def get_contact(
    contact_id: str = Path(..., title="The ID of the message to retrieve"),
    service: ContactService = Depends(get_contact_service),
    _: str = Depends(require_admin),
):
    return Envelope(data=service.get(contact_id))


@router.put("/{contact_id}/status", response_model=Envelope)
def update_contact_status(
    body: ContactStatusUpdate,
    contact_id: str = Path(..., title="The ID of the message to update"),
    service: ContactService = Depends(get_contact_service),
    _: str = Depends(require_admin),
):
    return Envelope(data=service.set_status(contact_id, body.status), message="Status updated successfully")


@router.delete("/{contact_id}", response_model=Envelope)
def delete_contact(
    contact_id: str = Path(..., title="The ID of the message to delete"),
    service: ContactService = Depends(get_contact_service),
    _: str = Depends(require_admin),
):
    service.delete(contact_id)
    return Envelope(message="Contact deleted successfully")
