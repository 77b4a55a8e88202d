from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from pipeline_app.models.schemas import LoginFailure, LoginRequest, LoginResponse, LoginUser
from pipeline_app.services.auth_service import (
    Credential,
    InvalidCredentialsError,
    MissingCredentialsError,
    authenticate,
    create_session_token,
)
from pipeline_app.services.dependencies import get_credentials

router = APIRouter(prefix="/api", tags=["auth"])

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
_LOGIN_BODY_SCHEMA = {"schema": LoginRequest.model_json_schema()}


async def read_login_payload(request: Request) -> LoginRequest:
    """Parse a login body sent as JSON or as an urlencoded form.

    Bodies of any other type, and JSON that is not an object, count as empty.
    """

    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if content_type == _FORM_CONTENT_TYPE:
        form = await request.form()
        return LoginRequest.model_validate(dict(form))

    body = await request.body()
    if not body or (content_type and not content_type.endswith("json")):
        return LoginRequest()

    try:
        data: Any = json.loads(body)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Malformed JSON body") from exc
    if not isinstance(data, dict):
        return LoginRequest()
    return LoginRequest.model_validate(data)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": LoginFailure}, 401: {"model": LoginFailure}},
    openapi_extra={
        "requestBody": {
            "content": {"application/json": _LOGIN_BODY_SCHEMA, _FORM_CONTENT_TYPE: _LOGIN_BODY_SCHEMA},
        }
    },
)
def login(
    payload: LoginRequest = Depends(read_login_payload),
    credentials: Mapping[str, Credential] = Depends(get_credentials),
) -> LoginResponse | JSONResponse:
    logger = structlog.get_logger("auth")
    try:
        credential = authenticate(credentials, payload.username, payload.password)
    except MissingCredentialsError as exc:
        return JSONResponse(status_code=400, content=LoginFailure(message=str(exc)).model_dump())
    except InvalidCredentialsError as exc:
        logger.info("login_rejected")
        return JSONResponse(status_code=401, content=LoginFailure(message=str(exc)).model_dump())

    username = str(payload.username)
    logger.info("login_succeeded", username=username, role=credential.role)
    return LoginResponse(
        token=create_session_token(username=username, role=credential.role),
        user=LoginUser(username=username, role=credential.role),
    )
