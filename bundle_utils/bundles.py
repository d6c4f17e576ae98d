"""Bundle lookup by symbolic name, with fragment-to-host redirection.

A bundle whose ``Fragment-Host`` header is set is a fragment: it has no
lifecycle of its own and attaches to the named host bundle.
"""

import logging
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from types import MappingProxyType
from typing import Protocol

from pydantic import BaseModel
from pydantic import Field
from pydantic import field_serializer
from pydantic import field_validator

logger = logging.getLogger(__name__)

BUNDLE_SYMBOLIC_NAME = "Bundle-SymbolicName"
BUNDLE_VERSION = "Bundle-Version"
FRAGMENT_HOST = "Fragment-Host"


class Bundle(BaseModel):
    """A deployable unit identified by its symbolic name."""

    symbolic_name: str = Field(..., description="Bundle symbolic name (without directives)")
    fragment_host: str | None = Field(None, description="Symbolic name of the host, if this is a fragment")
    version: str | None = Field(None, description="Bundle version")
    headers: Mapping[str, str] = Field(
        default_factory=dict, validate_default=True, description="Raw manifest headers (read-only)"
    )

    model_config = {"frozen": True}

    @field_validator("headers", mode="after")
    @classmethod
    def freeze_headers(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("headers")
    def serialize_headers(self, value: Mapping[str, str]) -> dict[str, str]:
        return dict(value)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "Bundle":
        """Build a bundle from manifest-style headers.

        Directives and attributes are stripped from ``Bundle-SymbolicName``
        (``com.acme.core;singleton:=true`` becomes ``com.acme.core``). The
        ``Fragment-Host`` value is kept raw; an empty value means no host.

        Raises:
            ValueError: No ``Bundle-SymbolicName`` header, or one with only directives
        """
        symbolic_name = (headers.get(BUNDLE_SYMBOLIC_NAME) or "").split(";", 1)[0].strip()
        if not symbolic_name:
            raise ValueError(f"Missing or empty {BUNDLE_SYMBOLIC_NAME} header")

        return cls(
            symbolic_name=symbolic_name,
            fragment_host=headers.get(FRAGMENT_HOST) or None,
            version=headers.get(BUNDLE_VERSION),
            headers=dict(headers),
        )


class BundleContext(Protocol):
    """Anything that can list installed bundles."""

    def get_bundles(self) -> Sequence[Bundle]: ...


class BundleRegistry:
    """Ordered, in-memory collection of bundles."""

    def __init__(self, bundles: Iterable[Bundle] | None = None):
        self._bundles: list[Bundle] = list(bundles or [])

    def add(self, bundle: Bundle) -> None:
        self._bundles.append(bundle)

    def get_bundles(self) -> tuple[Bundle, ...]:
        return tuple(self._bundles)

    def __len__(self) -> int:
        return len(self._bundles)

    def __repr__(self) -> str:
        return f"BundleRegistry({len(self._bundles)} bundles)"


def get_fragment_host(bundle: Bundle) -> str | None:
    """Get the host symbolic name of the bundle, or None if it is not a fragment."""
    return bundle.fragment_host


def is_fragment(bundle: Bundle) -> bool:
    return get_fragment_host(bundle) is not None


def find_bundle(context: BundleContext, symbolic_name: str, fragment_host: bool = True) -> Bundle | None:
    """Find a bundle by its symbolic name.

    Args:
        context: Source of installed bundles, scanned in the order it reports them
        symbolic_name: Symbolic name to look for
        fragment_host: If the match is a fragment, return its host instead

    Returns:
        The first matching bundle (or its host), None if nothing matches.
        Host lookup is a single hop: a fragment naming another fragment as
        host returns that second fragment.
    """
    for bundle in context.get_bundles():
        if bundle.symbolic_name != symbolic_name:
            continue
        if fragment_host:
            host = get_fragment_host(bundle)
            if host is not None:
                logger.debug(
                    f"[bundle:find] {symbolic_name} is a fragment -> host {host}",
                    extra={"event": "bundle:fragment_host", "bundle": symbolic_name, "host": host},
                )
                return find_bundle(context, host, fragment_host=False)
        return bundle

    logger.debug(
        f"[bundle:find] {symbolic_name} not found",
        extra={"event": "bundle:not_found", "bundle": symbolic_name},
    )
    return None
