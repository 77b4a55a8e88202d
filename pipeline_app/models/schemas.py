from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["admin", "user"]


class HealthStatus(BaseModel):
    uptime: float = Field(ge=0)
    message: str = "OK"
    timestamp: str
    version: str
    environment: str
    status: Literal["healthy"] = "healthy"


class AppInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    version: str
    description: str
    author: str
    build_number: str = Field(alias="buildNumber")
    git_commit: str = Field(alias="gitCommit")


class LoginRequest(BaseModel):
    username: Any = None
    password: Any = None


class LoginUser(BaseModel):
    username: str
    role: Role


class LoginResponse(BaseModel):
    success: Literal[True] = True
    message: str = "Login successful"
    token: str
    user: LoginUser


class LoginFailure(BaseModel):
    success: Literal[False] = False
    message: str


class UserRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    role: Role


class ErrorResponse(BaseModel):
    error: str
    message: str
