"""Translate GitHub payloads into domain records."""

from __future__ import annotations

from collections.abc import Mapping

from relsync.domain.model import RemoteAsset, RemoteRelease, TagRef

from .schema import AssetPayload, RefPayload, ReleasePayload

_TAG_REF_PREFIX = "refs/tags/"

type PayloadInput[T] = T | Mapping[str, object]


def parse_asset(payload: PayloadInput[AssetPayload]) -> RemoteAsset:
    model = payload if isinstance(payload, AssetPayload) else AssetPayload.model_validate(payload)
    return RemoteAsset(
        id=model.id,
        name=model.name,
        size=model.size,
        content_type=model.content_type,
        download_url=model.browser_download_url,
    )


def parse_release(payload: PayloadInput[ReleasePayload]) -> RemoteRelease:
    model = (
        payload if isinstance(payload, ReleasePayload) else ReleasePayload.model_validate(payload)
    )
    return RemoteRelease(
        id=model.id,
        tag_name=model.tag_name,
        name=model.name,
        target_commitish=model.target_commitish,
        draft=model.draft,
        prerelease=model.prerelease,
        upload_url=model.upload_url,
        html_url=model.html_url,
        assets=tuple(parse_asset(asset) for asset in model.assets),
    )


def parse_ref(payload: PayloadInput[RefPayload]) -> TagRef:
    model = payload if isinstance(payload, RefPayload) else RefPayload.model_validate(payload)
    return TagRef(name=model.ref.removeprefix(_TAG_REF_PREFIX), commit_sha=model.object.sha)


def upload_endpoint(upload_url: str) -> str:
    """Strip the RFC 6570 template suffix (``{?name,label}``) from an upload URL."""

    marker = upload_url.find("{")
    return upload_url if marker < 0 else upload_url[:marker]
