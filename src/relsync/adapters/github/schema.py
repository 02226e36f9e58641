"""Pydantic models describing the GitHub REST payloads relsync reads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AssetPayload(GitHubBaseModel):
    id: int
    name: str
    size: int = 0
    content_type: str | None = None
    state: str | None = None
    browser_download_url: str | None = None


class ReleasePayload(GitHubBaseModel):
    id: int
    tag_name: str
    name: str | None = None
    target_commitish: str = ""
    draft: bool = False
    prerelease: bool = False
    upload_url: str
    html_url: str = ""
    assets: list[AssetPayload] = Field(default_factory=list["AssetPayload"])


class RefObjectPayload(GitHubBaseModel):
    type: str
    sha: str


class RefPayload(GitHubBaseModel):
    ref: str
    object: RefObjectPayload


class ErrorDetailPayload(GitHubBaseModel):
    resource: str | None = None
    field: str | None = None
    code: str | None = None
    message: str | None = None


class ErrorPayload(GitHubBaseModel):
    message: str = ""
    documentation_url: str | None = None
    errors: list[ErrorDetailPayload] = Field(default_factory=list["ErrorDetailPayload"])

    def describe(self) -> str:
        details = [
            detail.message or detail.code or ""
            for detail in self.errors
            if detail.message or detail.code
        ]
        if details:
            return f"{self.message} ({'; '.join(details)})"
        return self.message
