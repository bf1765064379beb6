"""Per-resource API clients.

Reads go through the shared QueryCache under ``(resource, scope, ...)``
keys; writes go through the MutationRunner so every success invalidates
all cached queries of the resource before the user is notified.
"""
from __future__ import annotations

from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence

import httpx

from sitecms.client.assembler import PendingUpload, assemble
from sitecms.client.cache import CacheCoordinator, QueryCache, QueryKey, scoped_key
from sitecms.client.credentials import TokenStore
from sitecms.client.envelopes import Page, unwrap_item, unwrap_list
from sitecms.client.http import ApiClient
from sitecms.client.mutations import MutationRunner
from sitecms.client.notifications import Notifier
from sitecms.client.resolver import AssetUrlConfig, AssetUrlResolver


def _params_key(params: Mapping[str, Any]) -> tuple:
    return tuple(sorted((key, value) for key, value in params.items() if value is not None))


class ResourceClient:

    def __init__(
        self,
        api: ApiClient,
        cache: QueryCache,
        runner: MutationRunner,
        name: str,
        label: str,
        file_field: str = "images",
        resolver: Optional[AssetUrlResolver] = None,
    ) -> None:
        self._api = api
        self._cache = cache
        self._runner = runner
        self.name = name
        self.label = label
        self.file_field = file_field
        self._resolver = resolver

    def _resolved(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        return self._resolver.resolve_entity(entity) if self._resolver else entity

    def list_key(self, scope: Optional[Hashable] = None, **params: Any) -> QueryKey:
        key = scoped_key(self.name, scope)
        return key + _params_key(params) if params else key

    def list(self, scope: Optional[Hashable] = None, **params: Any) -> Page:
        """
        List entities; ``scope`` separates views such as "admin" and "public".
        """
        def fetch() -> Page:
            page = unwrap_list(self.name, self._api.get(f"/{self.name}", params=params))
            return Page(items=[self._resolved(item) for item in page.items], pagination=page.pagination)

        return self._cache.fetch(self.list_key(scope, **params), fetch)

    def get(self, entity_id: str) -> Dict[str, Any]:
        return self._cache.fetch(
            scoped_key(self.name, "detail", entity_id),
            lambda: self._resolved(unwrap_item(self.name, self._api.get(f"/{self.name}/{entity_id}"))),
        )

    def create(self, entity: Mapping[str, Any], files: Sequence[PendingUpload] = ()) -> Dict[str, Any]:
        def call() -> Dict[str, Any]:
            envelope = assemble(entity, files, self.file_field)
            return unwrap_item(self.name, self._api.post(f"/{self.name}", envelope=envelope))

        return self._runner.run(self.name, call, f"{self.label} created successfully")

    def update(self, entity_id: str, entity: Mapping[str, Any], files: Sequence[PendingUpload] = ()) -> Dict[str, Any]:
        def call() -> Dict[str, Any]:
            envelope = assemble(entity, files, self.file_field)
            return unwrap_item(self.name, self._api.put(f"/{self.name}/{entity_id}", envelope=envelope))

        return self._runner.run(self.name, call, f"{self.label} updated successfully")

    def delete(self, entity_id: str) -> None:
        self._runner.run(
            self.name,
            lambda: self._api.delete(f"/{self.name}/{entity_id}"),
            f"{self.label} deleted successfully",
        )


class ServicesClient(ResourceClient):

    def toggle(self, service_id: str) -> Dict[str, Any]:
        """Activate or deactivate a service."""
        return self._runner.run(
            self.name,
            lambda: unwrap_item(self.name, self._api.patch(f"/{self.name}/{service_id}/toggle")),
            "Service status updated",
        )

    def reorder(self, orders: Mapping[str, int]) -> None:
        """Set display positions, given as ``{service_id: order}``."""
        body = {"serviceOrders": [{"id": service_id, "order": order} for service_id, order in orders.items()]}
        self._runner.run(
            self.name,
            lambda: self._api.post(f"/{self.name}/reorder", json=body),
            "Services reordered successfully",
        )


class TeamClient(ResourceClient):

    def departments(self) -> List[str]:
        return self._cache.fetch(
            scoped_key(self.name, "departments"),
            lambda: list(self._api.get(f"/{self.name}/departments").data or []),
        )


class ContentClient:
    """Page sections, addressed by section name."""

    name = "content"

    def __init__(self, api: ApiClient, cache: QueryCache, runner: MutationRunner,
                 resolver: Optional[AssetUrlResolver] = None) -> None:
        self._api = api
        self._cache = cache
        self._runner = runner
        self._resolver = resolver

    def _resolved(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        return self._resolver.resolve_entity(entity) if self._resolver else entity

    def list(self) -> List[Dict[str, Any]]:
        return self._cache.fetch(
            scoped_key(self.name),
            lambda: [self._resolved(item) for item in unwrap_list(self.name, self._api.get("/content")).items],
        )

    def get(self, section: str) -> Dict[str, Any]:
        return self._cache.fetch(
            scoped_key(self.name, section),
            lambda: self._resolved(unwrap_item(self.name, self._api.get(f"/content/{section}"))),
        )

    def update(self, section: str, entity: Mapping[str, Any], files: Sequence[PendingUpload] = ()) -> Dict[str, Any]:
        def call() -> Dict[str, Any]:
            envelope = assemble(entity, files, "images")
            return unwrap_item(self.name, self._api.put(f"/content/{section}", envelope=envelope))

        return self._runner.run(self.name, call, "Content updated successfully")


ASSET_SETTINGS = ("logo", "favicon", "backgroundImage")


class CustomizationClient:
    """The single site customization record."""

    name = "customizations"

    def __init__(self, api: ApiClient, cache: QueryCache, runner: MutationRunner,
                 resolver: Optional[AssetUrlResolver] = None) -> None:
        self._api = api
        self._cache = cache
        self._runner = runner
        self._resolver = resolver

    def get(self) -> Dict[str, Any]:
        def fetch() -> Dict[str, Any]:
            customization = unwrap_item(self.name, self._api.get("/customizations"))
            return self._resolver.resolve_entity(customization) if self._resolver else customization

        return self._cache.fetch(scoped_key(self.name), fetch)

    def fonts(self) -> List[Dict[str, str]]:
        return self._cache.fetch(
            scoped_key(self.name, "fonts"),
            lambda: list(self._api.get("/customizations/fonts").data or []),
        )

    def update(self, entity: Mapping[str, Any], files_by_field: Optional[Mapping[str, PendingUpload]] = None) -> Dict[str, Any]:
        """
        Update settings; ``files_by_field`` maps "logo", "favicon" or
        "backgroundImage" to a new upload.
        """
        def call() -> Dict[str, Any]:
            # Stored asset URLs are only ever set by uploads; "" still clears one
            submitted = dict(entity) if isinstance(entity, Mapping) else entity
            for key in ASSET_SETTINGS:
                setting = submitted.get(key) if isinstance(submitted, dict) else None
                if isinstance(setting, Mapping) and setting.get("url"):
                    submitted[key] = {name: value for name, value in setting.items() if name != "url"}

            # Each upload key carries its own file, so no shared file key applies
            envelope = assemble(submitted, (), file_field_name="")
            for key, upload in (files_by_field or {}).items():
                envelope.files.append((key, upload))
            return unwrap_item(self.name, self._api.put("/customizations", envelope=envelope))

        return self._runner.run(self.name, call, "Customization updated successfully")

    def reset(self) -> Dict[str, Any]:
        return self._runner.run(
            self.name,
            lambda: unwrap_item(self.name, self._api.post("/customizations/reset")),
            "Customization reset to defaults",
        )


class ContactClient:
    """Public contact form plus the admin inbox."""

    name = "contact"

    def __init__(self, api: ApiClient, cache: QueryCache, runner: MutationRunner) -> None:
        self._api = api
        self._cache = cache
        self._runner = runner

    def submit(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        return self._runner.run(
            self.name,
            lambda: unwrap_item(self.name, self._api.post("/contact", json=dict(message))),
            "Message sent successfully! We'll get back to you soon.",
        )

    def list(self, **params: Any) -> Page:
        key = scoped_key(self.name, "admin") + _params_key(params)
        return self._cache.fetch(key, lambda: unwrap_list(self.name, self._api.get("/contact", params=params)))

    def get(self, contact_id: str) -> Dict[str, Any]:
        return self._cache.fetch(
            scoped_key(self.name, "detail", contact_id),
            lambda: unwrap_item(self.name, self._api.get(f"/contact/{contact_id}")),
        )

    def stats(self) -> Dict[str, int]:
        return self._cache.fetch(scoped_key(self.name, "stats"), lambda: dict(self._api.get("/contact/stats").data or {}))

    def update_status(self, contact_id: str, status: str) -> Dict[str, Any]:
        return self._runner.run(
            self.name,
            lambda: unwrap_item(self.name, self._api.put(f"/contact/{contact_id}/status", json={"status": status})),
            "Status updated successfully",
        )

    def delete(self, contact_id: str) -> None:
        self._runner.run(
            self.name,
            lambda: self._api.delete(f"/contact/{contact_id}"),
            "Contact deleted successfully",
        )


class SiteClient:
    """Every resource client wired to one transport, cache and notifier."""

    def __init__(
        self,
        api: ApiClient,
        cache: Optional[QueryCache] = None,
        notifier: Optional[Notifier] = None,
        resolver: Optional[AssetUrlResolver] = None,
    ) -> None:
        self.api = api
        self.cache = cache or QueryCache()
        self.coordinator = CacheCoordinator(self.cache)
        self.mutations = MutationRunner(self.coordinator, notifier)
        self.resolver = resolver

        shared = (api, self.cache, self.mutations)
        self.achievements = ResourceClient(*shared, name="achievements", label="Achievement", resolver=resolver)
        self.services = ServicesClient(*shared, name="services", label="Service", resolver=resolver)
        self.projects = ResourceClient(*shared, name="projects", label="Project", resolver=resolver)
        self.team = TeamClient(*shared, name="team", label="Team member", file_field="image", resolver=resolver)
        self.content = ContentClient(*shared, resolver=resolver)
        self.customizations = CustomizationClient(*shared, resolver=resolver)
        self.contact = ContactClient(*shared)

    @classmethod
    def from_settings(
        cls,
        settings,
        tokens: Optional[TokenStore] = None,
        notifier: Optional[Notifier] = None,
        http: Optional[httpx.Client] = None,
    ) -> "SiteClient":
        if http is not None:
            api = ApiClient(
                http,
                tokens=tokens,
                api_prefix=settings.API_PREFIX,
                json_timeout=settings.JSON_TIMEOUT_SECONDS,
                upload_timeout=settings.UPLOAD_TIMEOUT_SECONDS,
            )
        else:
            api = ApiClient.from_settings(settings, tokens=tokens)
        cache = QueryCache(stale_time=settings.CACHE_STALE_SECONDS, cache_time=settings.CACHE_TIME_SECONDS)
        resolver = AssetUrlResolver(AssetUrlConfig.from_settings(settings))
        return cls(api, cache=cache, notifier=notifier, resolver=resolver)

    def refetch(self) -> List[QueryKey]:
        """Run the refetches scheduled by earlier mutations."""
        return self.cache.refetch_pending()
