"""Pydantic schemas for Vercel REST API payloads.

Vercel API Documentation: https://vercel.com/docs/rest-api
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .base import CamelModel

EnvTarget = Literal["production", "preview", "development"]

ALL_TARGETS: tuple[EnvTarget, ...] = ("production", "preview", "development")


class VercelProject(BaseModel):
    """Project returned from GET /v9/projects."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Project ID")
    name: str = Field(..., description="Project name")
    framework: str | None = Field(None, description="Detected framework preset")


class VercelAccount(BaseModel):
    """User (GET /v2/user) or team (GET /v2/teams/{id}) information."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str | None = None
    email: str | None = None
    username: str | None = None


class EnvironmentVariable(CamelModel):
    """Variable to create on a project; always written as ``encrypted``."""

    key: str
    value: str
    target: list[EnvTarget] = Field(default_factory=lambda: list(ALL_TARGETS))
    git_branch: str | None = None


class StoredEnvironmentVariable(BaseModel):
    """Variable returned from GET /v9/projects/{id}/env."""

    model_config = ConfigDict(extra="allow")

    id: str
    key: str
    value: str | None = None


class UpsertResult(BaseModel):
    created: int
    updated: int


class TokenExchangeResponse(BaseModel):
    """Response of POST /v2/oauth/access_token."""

    model_config = ConfigDict(extra="allow")

    access_token: str
    token_type: str = "Bearer"
    installation_id: str
    user_id: str | None = None
    team_id: str | None = None
