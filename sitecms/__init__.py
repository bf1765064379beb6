"""
sitecms Application Package

Directory Structure:
├── client/            # Admin-side client: form assembly, asset URLs, query cache
├── routers/           # FastAPI route handlers
├── schemas/           # Pydantic models for API requests/responses
│   └── api_schemas.py # HTTP request/response structures
├── application/       # Use cases over the repositories and asset storage
├── domain/            # Resource field schemas, errors and events
├── db/                # SQLAlchemy models, session and repositories
├── uploads/           # Multipart form parsing and upload rules
├── storage/           # Uploaded file storage
│   ├── filesystem.py  # Local filesystem storage
│   └── s3.py          # S3 storage
└── config.py          # Application configuration

Entity Types Clarification:
1. **API Schemas** (sitecms.schemas.api_schemas): Pydantic models for HTTP requests/responses
2. **Database Models** (sitecms.db.models): SQLAlchemy tables, one per resource
3. **Resource Specs** (sitecms.domain.resources): the field list both of them follow

Stored files are always referenced by a path relative to the upload root
(``/uploads/images/...``); sitecms.client.resolver turns those paths into
loadable URLs.
"""
