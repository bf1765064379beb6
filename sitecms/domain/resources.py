"""Field schemas for every content resource.

A ResourceSpec says which fields an entity carries, how the string values
of a parsed multipart form become typed values, and which field receives
uploaded files. The HTTP layer, the entity service and the ORM mapping all
read from the same spec, so a field is declared exactly once.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import ValidationError


class FieldKind(str, Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DATE = "date"
    LIST = "list"
    MAPPING = "mapping"
    ASSETS = "assets"  # ordered list of stored file references
    ASSET = "asset"    # single stored file reference


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off", ""}


def to_column_name(name: str) -> str:
    """startDate -> start_date"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind = FieldKind.STRING
    required: bool = False
    default: Any = None
    choices: Tuple[str, ...] = ()
    max_length: Optional[int] = None
    min_length: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    keys: Tuple[str, ...] = ()  # known sub-keys of a MAPPING field
    pattern: Optional[str] = None
    attribute: Optional[str] = None  # ORM attribute when it differs from the snake_case name

    @property
    def column(self) -> str:
        return self.attribute or to_column_name(self.name)

    @property
    def is_asset(self) -> bool:
        return self.kind in (FieldKind.ASSETS, FieldKind.ASSET)

    def initial_value(self) -> Any:
        if self.default is not None:
            return self.default() if callable(self.default) else self.default
        if self.kind in (FieldKind.LIST, FieldKind.ASSETS):
            return []
        if self.kind == FieldKind.MAPPING:
            return {key: "" for key in self.keys}
        return None


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    label: str
    fields: Tuple[FieldSpec, ...]
    file_field: Optional[str] = None
    max_files: int = 0
    split_documents: bool = False  # non-image uploads go to ``documents``
    title_field: str = "title"
    filters: Tuple[str, ...] = ()
    order_by: Tuple[Tuple[str, bool], ...] = (("createdAt", True),)  # (field, descending)
    toggle_field: Optional[str] = None
    exclusive_flags: Tuple[str, ...] = ()  # at most one entity may have the flag set
    _by_name: Dict[str, FieldSpec] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._by_name.update({spec.name: spec for spec in self.fields})

    def get_field(self, name: str) -> FieldSpec | None:
        return self._by_name.get(name)

    @property
    def asset_fields(self) -> List[FieldSpec]:
        return [spec for spec in self.fields if spec.is_asset]

    def defaults(self) -> Dict[str, Any]:
        return {spec.name: spec.initial_value() for spec in self.fields}

    def coerce(self, values: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
        """Convert parsed form values into typed field values.

        Unknown keys are ignored. Asset fields are left out; uploads are
        attached separately. With ``partial`` (updates) required fields are
        only checked when present.
        """
        result: Dict[str, Any] = {}
        errors: List[Dict[str, Any]] = []

        for spec in self.fields:
            if spec.is_asset or spec.name not in values:
                continue
            try:
                result[spec.name] = coerce_value(spec, values[spec.name])
            except ValueError as exc:
                errors.append({"field": spec.name, "message": str(exc)})

        for spec in self.fields:
            if not spec.required:
                continue
            present = spec.name in result
            if (not partial and not present) or (present and result[spec.name] in (None, "", [])):
                errors.append({"field": spec.name, "message": f"{spec.name} is required"})

        if errors:
            raise ValidationError("Validation error", errors)
        return result


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"'{value}' is not a boolean")


def _coerce_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"'{value}' is not a valid date") from None


def _coerce_list(value: Any) -> List[str]:
    if isinstance(value, str):
        # Comma separated strings are accepted for list fields
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValueError("expected a list")
    return [str(item).strip() for item in items if str(item).strip()]


def coerce_value(spec: FieldSpec, value: Any) -> Any:
    kind = spec.kind
    if kind == FieldKind.BOOL:
        return _coerce_bool(value)
    if kind == FieldKind.DATE:
        return _coerce_date(value)
    if kind == FieldKind.LIST:
        return _coerce_list(value)
    if kind == FieldKind.MAPPING:
        if value == []:
            # ``field[]`` with no values resets the mapping
            return spec.initial_value()
        if not isinstance(value, Mapping):
            raise ValueError("expected an object")
        return {str(key): "" if item is None else str(item).strip() for key, item in value.items()}
    if kind in (FieldKind.INT, FieldKind.FLOAT):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        try:
            number = int(value) if kind == FieldKind.INT else float(value)
        except (TypeError, ValueError):
            raise ValueError(f"'{value}' is not a number") from None
        if spec.minimum is not None and number < spec.minimum:
            raise ValueError(f"must be at least {spec.minimum:g}")
        if spec.maximum is not None and number > spec.maximum:
            raise ValueError(f"must be at most {spec.maximum:g}")
        return number

    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("expected a string")
    text = value.strip()
    if spec.choices and text and text not in spec.choices:
        raise ValueError(f"must be one of: {', '.join(spec.choices)}")
    if spec.max_length is not None and len(text) > spec.max_length:
        raise ValueError(f"cannot be more than {spec.max_length} characters")
    if spec.pattern and text and not re.match(spec.pattern, text):
        raise ValueError("has an invalid format")
    if spec.min_length is not None and text and len(text) < spec.min_length:
        raise ValueError(f"must be at least {spec.min_length} characters long")
    return text


ACHIEVEMENTS = ResourceSpec(
    name="achievements",
    label="Achievement",
    fields=(
        FieldSpec("title", required=True, max_length=200),
        FieldSpec("description", required=True, max_length=2000),
        FieldSpec("date", FieldKind.DATE, required=True),
        FieldSpec("category", default="milestone",
                  choices=("award", "milestone", "certification", "recognition")),
        FieldSpec("featured", FieldKind.BOOL, default=False),
        FieldSpec("images", FieldKind.ASSETS),
        FieldSpec("documents", FieldKind.ASSETS),
    ),
    file_field="images",
    max_files=10,
    split_documents=True,
    order_by=(("date", True),),
)

SERVICES = ResourceSpec(
    name="services",
    label="Service",
    fields=(
        FieldSpec("title", required=True, max_length=100),
        FieldSpec("description", required=True, max_length=1000),
        FieldSpec("icon", default="FiCode"),
        FieldSpec("features", FieldKind.LIST),
        FieldSpec("price", required=True),
        FieldSpec("popular", FieldKind.BOOL, default=False),
        FieldSpec("gradient", default="from-blue-500 to-purple-600"),
        FieldSpec("order", FieldKind.INT, default=0),
        FieldSpec("active", FieldKind.BOOL, default=True),
        FieldSpec("category", default="development",
                  choices=("development", "design", "consulting", "security", "optimization", "other")),
        FieldSpec("duration"),
        FieldSpec("tags", FieldKind.LIST),
        FieldSpec("images", FieldKind.ASSETS),
    ),
    file_field="images",
    max_files=5,
    filters=("active", "category", "popular"),
    order_by=(("order", False), ("createdAt", True)),
    toggle_field="active",
    exclusive_flags=("popular",),
)

PROJECTS = ResourceSpec(
    name="projects",
    label="Project",
    fields=(
        FieldSpec("title", required=True, max_length=200),
        FieldSpec("description", required=True, max_length=2000),
        FieldSpec("startDate", FieldKind.DATE, required=True),
        FieldSpec("endDate", FieldKind.DATE),
        FieldSpec("status", default="planning",
                  choices=("planning", "in-progress", "completed", "on-hold")),
        FieldSpec("progress", FieldKind.INT, default=0, minimum=0, maximum=100),
        FieldSpec("technologies", FieldKind.LIST),
        FieldSpec("category"),
        FieldSpec("budget", FieldKind.FLOAT),
        FieldSpec("client"),
        FieldSpec("images", FieldKind.ASSETS),
    ),
    file_field="images",
    max_files=5,
    filters=("status", "category"),
    order_by=(("startDate", True),),
)

TEAM = ResourceSpec(
    name="team",
    label="Team member",
    fields=(
        FieldSpec("name", required=True, min_length=2, max_length=100),
        FieldSpec("position", required=True, min_length=2, max_length=100),
        FieldSpec("department", default="General", max_length=100),
        FieldSpec("email", pattern=EMAIL_PATTERN),
        FieldSpec("phone", max_length=20),
        FieldSpec("bio", max_length=1000),
        FieldSpec("skills", FieldKind.LIST),
        FieldSpec("image", FieldKind.ASSET),
        FieldSpec("socialLinks", FieldKind.MAPPING, keys=("linkedin", "twitter", "github")),
        FieldSpec("joinDate", FieldKind.DATE, default=date.today),
        FieldSpec("isLeader", FieldKind.BOOL, default=False),
        FieldSpec("isActive", FieldKind.BOOL, default=True),
        FieldSpec("order", FieldKind.INT, default=0),
    ),
    file_field="image",
    max_files=1,
    title_field="name",
    filters=("isActive", "department"),
    order_by=(("order", False), ("createdAt", False)),
    toggle_field="isActive",
)

CONTENT_SECTIONS = ("hero", "about", "services", "home")

CONTENT = ResourceSpec(
    name="content",
    label="Content",
    fields=(
        FieldSpec("section", required=True, choices=CONTENT_SECTIONS),
        FieldSpec("title"),
        FieldSpec("subtitle"),
        FieldSpec("content"),
        FieldSpec("images", FieldKind.ASSETS),
        FieldSpec("metadata", FieldKind.MAPPING, attribute="meta_data"),
    ),
    file_field="images",
    max_files=5,
    title_field="section",
    order_by=(("section", False),),
)

CONTACT_STATUSES = ("new", "in-progress", "resolved")

CONTACT = ResourceSpec(
    name="contact",
    label="Contact message",
    fields=(
        FieldSpec("name", required=True, max_length=100),
        FieldSpec("email", required=True, max_length=200, pattern=EMAIL_PATTERN),
        FieldSpec("subject", max_length=200),
        FieldSpec("message", required=True, max_length=5000),
        FieldSpec("queryType", default="general",
                  choices=("general", "project", "support", "career", "partnership")),
        FieldSpec("urgency", default="medium", choices=("low", "medium", "high", "critical")),
        FieldSpec("status", default="new", choices=CONTACT_STATUSES),
    ),
    title_field="subject",
    filters=("status", "queryType", "urgency"),
)

FONTS = ("Inter", "Roboto", "Open Sans", "Lato", "Montserrat", "Poppins", "Nunito", "Source Sans Pro")

# Upload keys of the customization form; each stores its file under ``<key>.url``
CUSTOMIZATION_ASSET_KEYS = ("logo", "favicon", "backgroundImage")

CUSTOMIZATION = ResourceSpec(
    name="customizations",
    label="Site customization",
    fields=(
        FieldSpec("logo", FieldKind.MAPPING, keys=("url", "alt", "width", "height"),
                  default=lambda: {"url": "", "alt": "Company Logo", "width": "120", "height": "40"}),
        FieldSpec("favicon", FieldKind.MAPPING, keys=("url",), default=lambda: {"url": ""}),
        FieldSpec("fonts", FieldKind.MAPPING, keys=("primary", "secondary", "headingWeight", "bodyWeight"),
                  default=lambda: {"primary": "Inter", "secondary": "Inter",
                                   "headingWeight": "600", "bodyWeight": "400"}),
        FieldSpec("colors", FieldKind.MAPPING,
                  keys=("primary", "secondary", "accent", "background", "text", "textSecondary"),
                  default=lambda: {"primary": "#3b82f6", "secondary": "#64748b", "accent": "#8b5cf6",
                                   "background": "#ffffff", "text": "#1f2937", "textSecondary": "#6b7280"}),
        FieldSpec("backgroundImage", FieldKind.MAPPING, keys=("url", "opacity", "position", "size", "repeat"),
                  default=lambda: {"url": "", "opacity": "0.1", "position": "center",
                                   "size": "cover", "repeat": "no-repeat"}),
        FieldSpec("customCSS", attribute="custom_css", default=""),
        FieldSpec("socialMedia", FieldKind.MAPPING,
                  keys=("linkedin", "twitter", "facebook", "instagram", "youtube", "github")),
        FieldSpec("contact", FieldKind.MAPPING, keys=("phone", "email", "address")),
        FieldSpec("seo", FieldKind.MAPPING, keys=("title", "description", "keywords"),
                  default=lambda: {"title": "ZEYA-TECH", "description": "Professional company website",
                                   "keywords": "company, business, professional"}),
    ),
    title_field="seo",
    order_by=(),
)

RESOURCES: Dict[str, ResourceSpec] = {
    spec.name: spec for spec in (ACHIEVEMENTS, SERVICES, PROJECTS, TEAM, CONTENT, CONTACT, CUSTOMIZATION)
}


def get_resource(name: str) -> ResourceSpec:
    try:
        return RESOURCES[name]
    except KeyError:
        raise KeyError(f"Unknown resource: {name}") from None
