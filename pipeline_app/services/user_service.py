from __future__ import annotations

from pipeline_app.models.schemas import UserRecord

_USERS: tuple[UserRecord, ...] = (
    UserRecord(id=1, username="admin", role="admin"),
    UserRecord(id=2, username="user1", role="user"),
    UserRecord(id=3, username="user2", role="user"),
)


def list_users() -> list[UserRecord]:
    return list(_USERS)
