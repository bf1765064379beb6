"""Resolve stored asset paths into URLs a browser can load."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

PASSTHROUGH_PREFIXES = ("http://", "https://", "data:")

# Entity fields holding asset references
ASSET_LIST_FIELDS = ("images", "documents")
ASSET_FIELDS = ("image", "logo", "favicon", "backgroundImage")


@dataclass(frozen=True)
class AssetUrlConfig:
    """Where assets are served from.

    In development without an explicit API origin a same-origin proxy
    forwards ``/uploads/*`` to the backend, so paths stay relative.
    """
    explicit_api_origin: Optional[str] = None
    is_development: bool = False
    page_origin: Optional[str] = None

    @classmethod
    def from_settings(cls, settings) -> "AssetUrlConfig":
        return cls(
            explicit_api_origin=settings.API_URL or None,
            is_development=settings.is_development,
            page_origin=settings.PUBLIC_ORIGIN or None,
        )


class AssetUrlResolver:

    def __init__(self, config: AssetUrlConfig) -> None:
        self._config = config

    @property
    def config(self) -> AssetUrlConfig:
        return self._config

    def resolve(self, ref: Any) -> str:
        """
        Map a stored reference to a loadable URL.

        Returns ``""`` when there is nothing to load. Absolute and ``data:``
        URLs are returned unchanged. Never raises; on an unexpected error the
        input is returned as given.
        """
        if not ref:
            return ""
        try:
            if isinstance(ref, Mapping):
                return self.resolve(ref.get("url"))
            if ref.startswith(PASSTHROUGH_PREFIXES):
                return ref

            # Leading slashes collapse so exactly one joins base and path
            path = ref.lstrip("/")
            config = self._config
            if config.is_development and not config.explicit_api_origin:
                return f"/{path}"

            base = config.explicit_api_origin if config.is_development else config.page_origin
            if not base:
                return f"/{path}"
            return f"{base.rstrip('/')}/{path}"
        except Exception:
            logger.exception(f"Could not resolve asset reference {ref!r}")
            return ref

    def resolve_entity(self, entity: Mapping[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``entity`` with every asset ``url`` resolved."""
        resolved = copy.deepcopy(dict(entity))
        for name in ASSET_LIST_FIELDS:
            for ref in resolved.get(name) or []:
                if isinstance(ref, dict) and ref.get("url"):
                    ref["url"] = self.resolve(ref["url"])
        for name in ASSET_FIELDS:
            ref = resolved.get(name)
            if isinstance(ref, dict) and ref.get("url"):
                ref["url"] = self.resolve(ref["url"])
        return resolved
