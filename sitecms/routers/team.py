from fastapi import APIRouter, Depends

from sitecms.application.entity_service import EntityService
from sitecms.dependencies import entity_service
from sitecms.routers.crud import build_resource_router
from sitecms.schemas.api_schemas import Envelope

router = APIRouter()
get_team = entity_service("team")


@router.get("/team/departments", response_model=Envelope)
def get_departments(service: EntityService = Depends(get_team)):
    """
    Departments of the active team members, alphabetically.
    """
    members = service.list({"isActive": True})["items"]
    departments = sorted({member["department"] for member in members if member.get("department")})
    return Envelope(data=departments)


# ``?active=true`` filters on isActive
router.include_router(build_resource_router("team", filter_aliases={"active": "isActive"}))
