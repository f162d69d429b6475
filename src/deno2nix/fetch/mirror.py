"""npm-compatible metadata lookups against the JSR mirror."""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from deno2nix.config import Config, ensure_network_allowed
from deno2nix.errors import MetadataLookupError
from deno2nix.fetch.model import MirrorDist


class MirrorClient(Protocol):
    async def fetch_dist(self, package: str, version: str) -> MirrorDist:
        """Return tarball URL and integrity for ``package@version``.

        Raises ``MetadataLookupError`` (or ``PolicyError``) when the
        lookup cannot produce both values.
        """
        ...


class HttpMirrorClient:
    """Mirror client backed by a shared ``httpx.AsyncClient``.

    Use as an async context manager so the connection pool is closed.
    """

    def __init__(
        self,
        config: Config,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.mirror_url.rstrip("/"),
            timeout=httpx.Timeout(config.request_timeout),
            headers={"Accept": "application/json"},
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> HttpMirrorClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_dist(self, package: str, version: str) -> MirrorDist:
        ensure_network_allowed(config=self.config, operation="fetch_dist")
        context = {"operation": "fetch_dist", "package": package, "version": version}
        try:
            response = await self._client.get(f"/{package}")
        except httpx.TimeoutException as exc:
            raise MetadataLookupError(
                f"Timed out fetching metadata for {package}.",
                context={**context, "reason": type(exc).__name__},
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise MetadataLookupError(
                f"Error fetching metadata for {package}: {exc}",
                context=context,
            ) from exc

        if not response.is_success:
            raise MetadataLookupError(
                f"Failed to fetch metadata for {package}: {response.status_code}",
                context={**context, "status": str(response.status_code)},
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise MetadataLookupError(
                f"Mirror returned invalid JSON for {package}.",
                context=context,
            ) from exc
        return dist_from_metadata(payload, package=package, version=version)


def dist_from_metadata(payload: Any, *, package: str, version: str) -> MirrorDist:
    """Select ``versions[version].dist`` from an npm packument."""
    versions = payload.get("versions") if isinstance(payload, dict) else None
    version_data = versions.get(version) if isinstance(versions, dict) else None
    dist = version_data.get("dist") if isinstance(version_data, dict) else None
    if not isinstance(dist, dict):
        raise MetadataLookupError(
            f"No dist info for {package}@{version}.",
            hint="The version may not be published to the mirror yet.",
            context={"operation": "fetch_dist", "package": package, "version": version},
        )
    tarball = dist.get("tarball")
    integrity = dist.get("integrity")
    if not isinstance(tarball, str) or not tarball or not isinstance(integrity, str):
        raise MetadataLookupError(
            f"Incomplete dist info for {package}@{version}.",
            context={"operation": "fetch_dist", "package": package, "version": version},
        )
    return MirrorDist(tarball=tarball, integrity=integrity)


__all__ = ["HttpMirrorClient", "MirrorClient", "dist_from_metadata"]
