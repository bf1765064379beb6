"""
API Request/Response Schemas using Pydantic.

Every response uses the same envelope: ``{success, data, message}`` plus
``pagination`` on paginated lists. Create/update bodies of the content
resources are multipart forms and are parsed by sitecms.uploads.form_parser
instead of a schema.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class PaginationInfo(BaseModel):
    page: int = Field(..., description="Current 1-based page")
    pages: int = Field(..., description="Number of pages")
    total: int = Field(..., description="Number of matching items")
    limit: int = Field(..., description="Page size")


class Envelope(BaseModel):
    success: bool = Field(default=True, description="Whether the operation was successful")
    data: Any = Field(None, description="Payload of the response")
    message: Optional[str] = Field(None, description="Human readable outcome")
    pagination: Optional[PaginationInfo] = Field(None, description="Present on paginated lists")


class ErrorResponse(BaseModel):
    success: bool = Field(default=False)
    message: str = Field(..., description="What went wrong")
    errors: List[Dict[str, Any]] = Field(default_factory=list, description="Per-field validation errors")
    error: Optional[str] = Field(None, description="Machine readable error code for upload failures")


# Contact schemas
class ContactSubmission(BaseModel):
    name: str = Field(..., description="Sender name")
    email: str = Field(..., description="Sender email address")
    subject: Optional[str] = Field(None, description="Message subject")
    message: str = Field(..., description="Message body")
    queryType: Optional[str] = Field(None, description="general, project, support, career or partnership")
    urgency: Optional[str] = Field(None, description="low, medium, high or critical")


class ContactStatusUpdate(BaseModel):
    status: str = Field(..., description="new, in-progress or resolved")


# Service ordering
class ServiceOrder(BaseModel):
    id: str = Field(..., description="ID of the service")
    order: int = Field(..., description="New position")


class ReorderRequest(BaseModel):
    serviceOrders: List[ServiceOrder] = Field(..., description="New positions of the services")
