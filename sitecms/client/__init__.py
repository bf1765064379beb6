"""Admin-side client of the site CMS API.

    from sitecms.client import SiteClient, PendingUpload, CLEAR

    client = SiteClient.from_settings(settings, tokens=TokenStore(token))
    client.services.create({"title": "Audit", "features": ["Fast", "Secure"]},
                           files=[PendingUpload.from_path("cover.png")])
    client.services.list("admin")
"""
from sitecms.client.assembler import CLEAR, PendingUpload, SubmissionEnvelope, assemble
from sitecms.client.cache import CacheCoordinator, QueryCache
from sitecms.client.credentials import TokenStore
from sitecms.client.envelopes import Envelope, Page
from sitecms.client.errors import (
    AuthExpiredError,
    ClientError,
    InvalidInputError,
    NetworkError,
    RateLimitedError,
    RequestTimeoutError,
    ServerError,
    ServerValidationError,
)
from sitecms.client.http import ApiClient
from sitecms.client.mutations import MutationRunner
from sitecms.client.notifications import LoggingNotifier, Notifier
from sitecms.client.resolver import AssetUrlConfig, AssetUrlResolver
from sitecms.client.resources import SiteClient

__all__ = [
    "ApiClient",
    "AssetUrlConfig",
    "AssetUrlResolver",
    "AuthExpiredError",
    "CLEAR",
    "CacheCoordinator",
    "ClientError",
    "Envelope",
    "InvalidInputError",
    "LoggingNotifier",
    "MutationRunner",
    "NetworkError",
    "Notifier",
    "Page",
    "PendingUpload",
    "QueryCache",
    "RateLimitedError",
    "RequestTimeoutError",
    "ServerError",
    "ServerValidationError",
    "SiteClient",
    "SubmissionEnvelope",
    "TokenStore",
    "assemble",
]
