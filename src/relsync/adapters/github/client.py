"""GitHub REST implementation of the release-hosting port."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Unpack
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from relsync.adapters.http_resilience import classify_throttle
from relsync.config.http_resilience import ThrottleSignal
from relsync.domain.errors import ServiceError, ServiceErrorKind

from .schema import AssetPayload, ErrorPayload, RefPayload, ReleasePayload
from .translator import parse_asset, parse_ref, parse_release, upload_endpoint

if TYPE_CHECKING:
    from collections.abc import Callable

    from httpx._types import URLTypes

    from relsync.adapters.http_resilience import RequestOptions, ResilientClient
    from relsync.config.github import GitHubConfig
    from relsync.domain.model import LocalAsset, RemoteAsset, RemoteRelease, TagRef
    from relsync.domain.ports.hosting import ReleaseHostingService

log = getLogger(__name__)

PAGE_SIZE = 100
_UPLOAD_TIMEOUT_SECONDS = 300.0


class GitHubReleaseService:
    """Release, asset and tag-ref operations for one repository."""

    def __init__(self, *, config: GitHubConfig, client: ResilientClient) -> None:
        self._config = config
        self._client = client
        self._repo_path = f"/repos/{quote(config.owner)}/{quote(config.repo)}"

    async def get_release_by_tag(self, tag: str) -> RemoteRelease:
        response = await self._request(
            "get_release_by_tag",
            "GET",
            f"{self._repo_path}/releases/tags/{quote(tag, safe='')}",
        )
        return self._parse("get_release_by_tag", response, parse_release, ReleasePayload)

    async def list_releases(self) -> list[RemoteRelease]:
        releases: list[RemoteRelease] = []
        page = 1
        while True:
            response = await self._request(
                "list_releases",
                "GET",
                f"{self._repo_path}/releases",
                params={"per_page": PAGE_SIZE, "page": page},
            )
            batch = self._parse_list("list_releases", response, parse_release, ReleasePayload)
            releases.extend(batch)
            if len(batch) < PAGE_SIZE:
                return releases
            page += 1

    async def create_release(
        self,
        *,
        tag_name: str,
        name: str,
        draft: bool,
        prerelease: bool,
        target_commitish: str | None = None,
        generate_release_notes: bool = True,
    ) -> RemoteRelease:
        body: dict[str, object] = {
            "tag_name": tag_name,
            "name": name,
            "draft": draft,
            "prerelease": prerelease,
            "generate_release_notes": generate_release_notes,
        }
        if target_commitish:
            body["target_commitish"] = target_commitish
        response = await self._request(
            "create_release", "POST", f"{self._repo_path}/releases", json=body
        )
        return self._parse("create_release", response, parse_release, ReleasePayload)

    async def update_release(
        self,
        release_id: int,
        *,
        tag_name: str,
        target_commitish: str,
        draft: bool,
        prerelease: bool,
    ) -> RemoteRelease:
        body: dict[str, object] = {
            "tag_name": tag_name,
            "target_commitish": target_commitish,
            "draft": draft,
            "prerelease": prerelease,
        }
        response = await self._request(
            "update_release",
            "PATCH",
            f"{self._repo_path}/releases/{release_id}",
            json=body,
        )
        return self._parse("update_release", response, parse_release, ReleasePayload)

    async def delete_release(self, release_id: int) -> None:
        await self._request("delete_release", "DELETE", f"{self._repo_path}/releases/{release_id}")

    async def list_release_assets(self, release_id: int) -> list[RemoteAsset]:
        assets: list[RemoteAsset] = []
        page = 1
        while True:
            response = await self._request(
                "list_release_assets",
                "GET",
                f"{self._repo_path}/releases/{release_id}/assets",
                params={"per_page": PAGE_SIZE, "page": page},
            )
            batch = self._parse_list("list_release_assets", response, parse_asset, AssetPayload)
            assets.extend(batch)
            if len(batch) < PAGE_SIZE:
                return assets
            page += 1

    async def delete_release_asset(self, asset_id: int) -> None:
        await self._request(
            "delete_release_asset",
            "DELETE",
            f"{self._repo_path}/releases/assets/{asset_id}",
        )

    async def upload_release_asset(
        self,
        release: RemoteRelease,
        asset: LocalAsset,
    ) -> RemoteAsset:
        response = await self._request(
            "upload_release_asset",
            "POST",
            upload_endpoint(release.upload_url),
            params={"name": asset.name},
            headers={
                "Content-Type": asset.content_type,
                "Content-Length": str(asset.size_bytes),
            },
            content=asset.payload,
            timeout=_UPLOAD_TIMEOUT_SECONDS,
        )
        return self._parse("upload_release_asset", response, parse_asset, AssetPayload)

    async def get_ref(self, tag: str) -> TagRef:
        response = await self._request(
            "get_ref", "GET", f"{self._repo_path}/git/ref/tags/{quote(tag)}"
        )
        return self._parse("get_ref", response, parse_ref, RefPayload)

    async def create_ref(self, tag: str, sha: str) -> TagRef:
        response = await self._request(
            "create_ref",
            "POST",
            f"{self._repo_path}/git/refs",
            json={"ref": f"refs/tags/{tag}", "sha": sha},
        )
        return self._parse("create_ref", response, parse_ref, RefPayload)

    async def delete_ref(self, tag: str) -> None:
        await self._request("delete_ref", "DELETE", f"{self._repo_path}/git/refs/tags/{quote(tag)}")

    async def _request(
        self,
        operation: str,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        log.debug("GitHub %s: %s %s", operation, method, url)
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ServiceError(
                f"GitHub {operation} failed: {exc}",
                kind=ServiceErrorKind.OTHER,
                operation=operation,
            ) from exc
        _raise_for_status(operation, response)
        return response

    @staticmethod
    def _parse[M: BaseModel, T](
        operation: str,
        response: httpx.Response,
        translate: Callable[[M], T],
        model: type[M],
    ) -> T:
        try:
            return translate(model.model_validate(response.json()))
        except (ValidationError, ValueError) as exc:
            raise _unexpected_payload(operation, response, exc) from exc

    @staticmethod
    def _parse_list[M: BaseModel, T](
        operation: str,
        response: httpx.Response,
        translate: Callable[[M], T],
        model: type[M],
    ) -> list[T]:
        try:
            payload = response.json()
            if not isinstance(payload, list):
                raise ValueError("expected a JSON array")
            return [translate(model.model_validate(item)) for item in payload]
        except (ValidationError, ValueError) as exc:
            raise _unexpected_payload(operation, response, exc) from exc


def _raise_for_status(operation: str, response: httpx.Response) -> None:
    if response.is_success:
        return
    detail = _error_detail(response)
    raise ServiceError(
        f"GitHub {operation} failed with HTTP {response.status_code}: {detail}",
        kind=_error_kind(response),
        operation=operation,
        status=response.status_code,
        detail=detail,
    )


def _error_kind(response: httpx.Response) -> ServiceErrorKind:
    if response.status_code == httpx.codes.NOT_FOUND:
        return ServiceErrorKind.NOT_FOUND
    match classify_throttle(response):
        case ThrottleSignal.RATE_LIMITED:
            return ServiceErrorKind.RATE_LIMITED
        case ThrottleSignal.ABUSE_DETECTED:
            return ServiceErrorKind.ABUSE_DETECTED
        case None:
            return ServiceErrorKind.OTHER


def _error_detail(response: httpx.Response) -> str:
    try:
        return ErrorPayload.model_validate(response.json()).describe()
    except (ValidationError, ValueError):
        return response.text.strip() or response.reason_phrase


def _unexpected_payload(operation: str, response: httpx.Response, exc: Exception) -> ServiceError:
    return ServiceError(
        f"Unexpected GitHub {operation} response payload: {exc}",
        kind=ServiceErrorKind.OTHER,
        operation=operation,
        status=response.status_code,
    )


if TYPE_CHECKING:

    def _service_check(service: GitHubReleaseService) -> ReleaseHostingService:
        return service
