from fastapi import APIRouter, Path, Depends

from sitecms.application.entity_service import EntityService
from sitecms.dependencies import entity_service, require_admin
from sitecms.routers.crud import build_resource_router
from sitecms.schemas.api_schemas import Envelope, ReorderRequest

router = APIRouter()
get_services = entity_service("services")


@router.patch("/services/{service_id}/toggle", response_model=Envelope)
def toggle_service(
    service_id: str = Path(..., title="The ID of the service to toggle"),
    service: EntityService = Depends(get_services),
    _: str = Depends(require_admin),
):
    """
    Activate or deactivate a service.
    """
    toggled = service.toggle(service_id)
    state = "activated" if toggled["active"] else "deactivated"
    return Envelope(data=toggled, message=f"Service {state} successfully")


@router.post("/services/reorder", response_model=Envelope)
def reorder_services(
    body: ReorderRequest,
    service: EntityService = Depends(get_services),
    _: str = Depends(require_admin),
):
    """
    Set the display order of several services at once.
    """
    updated = service.reorder([item.model_dump() for item in body.serviceOrders])
    return Envelope(message=f"{updated} services reordered successfully")


router.include_router(build_resource_router("services"))
