"""Router factory shared by the multipart-edited resources.

Each resource router exposes list/get/create/update/delete; create and
update accept bracket-notation multipart forms (or JSON) and the files
of the resource's upload field.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path, Request
from starlette.concurrency import run_in_threadpool

from sitecms.application.entity_service import EntityService
from sitecms.dependencies import entity_service, require_admin
from sitecms.domain.errors import ValidationError
from sitecms.domain.resources import ResourceSpec, coerce_value, get_resource
from sitecms.rate_limit import upload_limit
from sitecms.schemas.api_schemas import Envelope
from sitecms.uploads.form_parser import read_submission

logger = logging.getLogger(__name__)


def parse_filters(request: Request, spec: ResourceSpec, aliases: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Turn list query parameters into typed field filters.

    Values that do not fit the field (e.g. ``?active=all``) apply no filter.
    """
    aliases = aliases or {}
    filters: Dict[str, Any] = {}
    for param, raw in request.query_params.items():
        name = aliases.get(param, param)
        if name not in spec.filters or raw == "":
            continue
        try:
            filters[name] = coerce_value(spec.get_field(name), raw)
        except ValueError as exc:
            logger.debug(f"Ignoring {spec.name} filter {param}={raw!r}: {exc}")
    return filters


def parse_paging(request: Request, default_limit: Optional[int]):
    def number(name: str, default: Optional[int]) -> Optional[int]:
        raw = request.query_params.get(name)
        if raw in (None, ""):
            return default
        try:
            value = int(raw)
        except ValueError:
            raise ValidationError(f"Query parameter '{name}' must be an integer") from None
        if value < 1:
            raise ValidationError(f"Query parameter '{name}' must be at least 1")
        return value

    return number("page", 1), number("limit", default_limit)


def build_resource_router(
    resource: str,
    list_key: Optional[str] = None,
    item_key: Optional[str] = None,
    default_limit: Optional[int] = None,
    filter_aliases: Optional[Dict[str, str]] = None,
) -> APIRouter:
    """
    Build the CRUD router of one resource.

    Args:
        resource: Resource name, also the URL segment
        list_key: Nest list results as ``data[list_key]`` next to ``data.pagination``
        item_key: Nest single entities as ``data[item_key]``
        default_limit: Page size when the request gives none (None lists everything)
        filter_aliases: Query parameter names that map onto other field names
    """
    spec = get_resource(resource)
    router = APIRouter(prefix=f"/{resource}")
    get_service = entity_service(resource)

    def wrap(entity: Dict[str, Any]) -> Any:
        return {item_key: entity} if item_key else entity

    @router.get("", response_model=Envelope)
    def list_entities(request: Request, service: EntityService = Depends(get_service)):
        filters = parse_filters(request, spec, filter_aliases)
        page, limit = parse_paging(request, default_limit)
        result = service.list(filters, page=page, limit=limit)
        if list_key:
            return Envelope(data={list_key: result["items"], "pagination": result["pagination"]})
        return Envelope(data=result["items"], pagination=result["pagination"] if limit else None)

    @router.get("/{entity_id}", response_model=Envelope)
    def get_entity(
        entity_id: str = Path(..., title=f"The ID of the {spec.label.lower()} to retrieve"),
        service: EntityService = Depends(get_service),
    ):
        return Envelope(data=wrap(service.get(entity_id)))

    @router.post("", response_model=Envelope, status_code=201)
    @upload_limit(f"create_{spec.name}")
    async def create_entity(
        request: Request,
        service: EntityService = Depends(get_service),
        _: str = Depends(require_admin),
    ):
        submission = await read_submission(request)
        entity = await run_in_threadpool(service.create, submission.fields, submission.files)
        return Envelope(data=wrap(entity), message=f"{spec.label} created successfully")

    @router.put("/{entity_id}", response_model=Envelope)
    @upload_limit(f"update_{spec.name}")
    async def update_entity(
        request: Request,
        entity_id: str = Path(..., title=f"The ID of the {spec.label.lower()} to update"),
        service: EntityService = Depends(get_service),
        _: str = Depends(require_admin),
    ):
        submission = await read_submission(request)
        entity = await run_in_threadpool(service.update, entity_id, submission.fields, submission.files)
        return Envelope(data=wrap(entity), message=f"{spec.label} updated successfully")

    @router.delete("/{entity_id}", response_model=Envelope)
    def delete_entity(
        entity_id: str = Path(..., title=f"The ID of the {spec.label.lower()} to delete"),
        service: EntityService = Depends(get_service),
        _: str = Depends(require_admin),
    ):
        service.delete(entity_id)
        return Envelope(message=f"{spec.label} deleted successfully")

    return router
