"""Image reference -> routing keys.

Two lookup tables with deliberately different policies:

  exception map  exact `namespace/repo` match, every matching entry applies
  prefix map     `namespace` match, the first matching entry wins

The exception map is consulted first; the prefix map only when no exception
matched.
"""
from __future__ import annotations

from typing import Sequence

from .settings import MapEntry

ROOT_SUBDOMAINS = frozenset({"www", "web"})


def strip_tag(image: str) -> str:
    """`frozenridge/foo:latest` -> `frozenridge/foo`.

    Only a colon after the last `/` starts a tag; `host:5000/ns/app` is kept.
    """
    name, _, last = image.rpartition("/")
    repo = last.split(":", 1)[0]
    return f"{name}/{repo}" if name else repo


def exception_routes(bare_image: str, exception_map: Sequence[MapEntry]) -> list[str]:
    return [target for source, target in exception_map if source == bare_image]


def prefix_routes(bare_image: str, prefix_map: Sequence[MapEntry]) -> list[str]:
    parts = bare_image.split("/")
    if len(parts) != 2:
        return []
    namespace, subdomain = parts

    domain = next((target for source, target in prefix_map if source == namespace), None)
    if domain is None:
        return []

    keys = [f"{subdomain}.{domain}"]
    if subdomain in ROOT_SUBDOMAINS:
        # `www` yields www.<domain> twice; both writes carry the same backend.
        keys.extend([f"www.{domain}", domain])
    return keys


def routes_for(image: str, exception_map: Sequence[MapEntry], prefix_map: Sequence[MapEntry]) -> list[str]:
    bare = strip_tag(image)
    keys = exception_routes(bare, exception_map)
    if keys:
        return keys
    return prefix_routes(bare, prefix_map)
