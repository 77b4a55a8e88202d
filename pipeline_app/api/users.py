from __future__ import annotations

from fastapi import APIRouter

from pipeline_app.models.schemas import UserRecord
from pipeline_app.services.user_service import list_users

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users", response_model=list[UserRecord])
async def users() -> list[UserRecord]:
    return list_users()
