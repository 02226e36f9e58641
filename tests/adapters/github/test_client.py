from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

import httpx
import pytest

from relsync.adapters.github import GitHubReleaseService
from relsync.domain.errors import ServiceError, ServiceErrorKind
from relsync.domain.model import LocalAsset, TagRef
from tests.support.github import (
    Handler,
    asset_payload,
    ref_payload,
    release_payload,
)

type ServiceBuilder = Callable[[Handler], GitHubReleaseService]


def test_get_release_by_tag_parses_release(make_service: ServiceBuilder) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        assets = [asset_payload(1, "a.zip"), asset_payload(2, "b.zip")]
        return httpx.Response(200, json=release_payload(assets=assets))

    release = asyncio.run(make_service(handler).get_release_by_tag("v1.0.0"))

    assert release.id == 7
    assert release.asset_names == {"a.zip", "b.zip"}
    assert release.assets[0].download_url == "https://github.test/download/a.zip"
    (request,) = seen
    assert request.method == "GET"
    assert request.url.host == "api.github.test"
    assert request.url.path == "/repos/octo/widgets/releases/tags/v1.0.0"
    assert request.headers["Authorization"] == "Bearer t0ken"
    assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"
    assert request.headers["Accept"] == "application/vnd.github+json"


def test_tag_names_are_escaped_in_release_lookup(make_service: ServiceBuilder) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=release_payload(tag="release/1.0"))

    asyncio.run(make_service(handler).get_release_by_tag("release/1.0"))

    assert seen[0].url.raw_path.endswith(b"/releases/tags/release%2F1.0")


def test_missing_release_maps_to_not_found(make_service: ServiceBuilder) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    with pytest.raises(ServiceError) as excinfo:
        asyncio.run(make_service(handler).get_release_by_tag("v9.9.9"))

    assert excinfo.value.kind is ServiceErrorKind.NOT_FOUND
    assert excinfo.value.is_not_found
    assert excinfo.value.status == 404
    assert excinfo.value.operation == "get_release_by_tag"


def test_list_releases_follows_pages(make_service: ServiceBuilder) -> None:
    pages: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        pages.append(params)
        if params["page"] == "1":
            return httpx.Response(200, json=[release_payload(i, f"v0.{i}") for i in range(100)])
        return httpx.Response(200, json=[release_payload(500, "v1.0.0", draft=True)])

    releases = asyncio.run(make_service(handler).list_releases())

    assert len(releases) == 101
    assert releases[-1].draft is True
    assert [page["page"] for page in pages] == ["1", "2"]
    assert {page["per_page"] for page in pages} == {"100"}


def test_list_release_assets_single_page(make_service: ServiceBuilder) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[asset_payload(1, "a.zip")])

    assets = asyncio.run(make_service(handler).list_release_assets(7))

    assert [asset.name for asset in assets] == ["a.zip"]
    assert len(seen) == 1
    assert seen[0].url.path == "/repos/octo/widgets/releases/7/assets"


def test_create_release_sends_expected_body(make_service: ServiceBuilder) -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/repos/octo/widgets/releases"
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json=release_payload(draft=True))

    release = asyncio.run(
        make_service(handler).create_release(
            tag_name="v1.0.0", name="v1.0.0", draft=True, prerelease=False
        )
    )

    assert release.draft is True
    assert bodies == [
        {
            "tag_name": "v1.0.0",
            "name": "v1.0.0",
            "draft": True,
            "prerelease": False,
            "generate_release_notes": True,
        }
    ]


def test_update_release_patches_release(make_service: ServiceBuilder) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=release_payload(target_commitish="next"))

    release = asyncio.run(
        make_service(handler).update_release(
            7, tag_name="v1.0.0", target_commitish="next", draft=False, prerelease=True
        )
    )

    assert release.target_commitish == "next"
    (request,) = seen
    assert request.method == "PATCH"
    assert request.url.path == "/repos/octo/widgets/releases/7"
    assert json.loads(request.content) == {
        "tag_name": "v1.0.0",
        "target_commitish": "next",
        "draft": False,
        "prerelease": True,
    }


def test_delete_operations_use_expected_paths(make_service: ServiceBuilder) -> None:
    seen: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        return httpx.Response(204)

    service = make_service(handler)

    async def scenario() -> None:
        await service.delete_release(7)
        await service.delete_release_asset(11)
        await service.delete_ref("v1.0.0")

    asyncio.run(scenario())

    assert seen == [
        ("DELETE", "/repos/octo/widgets/releases/7"),
        ("DELETE", "/repos/octo/widgets/releases/assets/11"),
        ("DELETE", "/repos/octo/widgets/git/refs/tags/v1.0.0"),
    ]


def test_upload_posts_to_upload_endpoint(make_service: ServiceBuilder) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.github.test":
            return httpx.Response(200, json=release_payload())
        seen.append(request)
        return httpx.Response(201, json=asset_payload(31, "a.zip"))

    service = make_service(handler)
    payload = b"PK\x03\x04abc"
    asset = LocalAsset(
        name="a.zip", content_type="application/zip", size_bytes=len(payload), payload=payload
    )

    async def scenario() -> None:
        release = await service.get_release_by_tag("v1.0.0")
        remote = await service.upload_release_asset(release, asset)
        assert remote.id == 31

    asyncio.run(scenario())

    (request,) = seen
    assert request.method == "POST"
    assert request.url.host == "uploads.github.test"
    assert request.url.path == "/repos/octo/widgets/releases/7/assets"
    assert request.url.params["name"] == "a.zip"
    assert request.headers["Content-Type"] == "application/zip"
    assert request.content == b"PK\x03\x04abc"


def test_get_ref_strips_tag_prefix(make_service: ServiceBuilder) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/octo/widgets/git/ref/tags/v1.0.0"
        return httpx.Response(200, json=ref_payload("v1.0.0", "abc123"))

    ref = asyncio.run(make_service(handler).get_ref("v1.0.0"))

    assert ref == TagRef(name="v1.0.0", commit_sha="abc123")


def test_create_ref_sends_full_ref_name(make_service: ServiceBuilder) -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/octo/widgets/git/refs"
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json=ref_payload("v1.0.0", "abc123"))

    ref = asyncio.run(make_service(handler).create_ref("v1.0.0", "abc123"))

    assert ref.commit_sha == "abc123"
    assert bodies == [{"ref": "refs/tags/v1.0.0", "sha": "abc123"}]


def test_validation_error_detail_is_kept(make_service: ServiceBuilder) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            422,
            json={"message": "Reference already exists", "errors": [{"code": "already_exists"}]},
        )

    with pytest.raises(ServiceError) as excinfo:
        asyncio.run(make_service(handler).create_ref("v1.0.0", "abc123"))

    assert excinfo.value.kind is ServiceErrorKind.OTHER
    assert excinfo.value.status == 422
    assert excinfo.value.detail == "Reference already exists (already_exists)"
    assert "HTTP 422" in str(excinfo.value)


def test_secondary_rate_limit_maps_to_abuse(make_service: ServiceBuilder) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(403, json={"message": "You have exceeded a secondary rate limit."})

    with pytest.raises(ServiceError) as excinfo:
        asyncio.run(make_service(handler).list_releases())

    assert excinfo.value.kind is ServiceErrorKind.ABUSE_DETECTED
    assert len(calls) == 1


def test_unexpected_payload_is_reported(make_service: ServiceBuilder) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"unexpected": True})

    with pytest.raises(ServiceError, match="Unexpected GitHub get_release_by_tag"):
        asyncio.run(make_service(handler).get_release_by_tag("v1.0.0"))


def test_transport_errors_become_service_errors(make_service: ServiceBuilder) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ServiceError) as excinfo:
        asyncio.run(make_service(handler).delete_release(7))

    assert excinfo.value.kind is ServiceErrorKind.OTHER
    assert excinfo.value.status is None
