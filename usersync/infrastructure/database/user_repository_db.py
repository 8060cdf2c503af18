"""DB-backed user mirror (users table)."""

from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from usersync.domain.models.user import User
from usersync.infrastructure.database.models import UserRow


def _to_user(orm: UserRow) -> User:
    return User(
        id=orm.id,
        email=orm.email,
        first_name=orm.first_name,
        last_name=orm.last_name,
        email_verified=bool(orm.email_verified),
        profile_picture_url=orm.profile_picture_url,
        created_at=orm.created_at,
        updated_at=orm.updated_at,
        attributes=dict(orm.attributes or {}),
    )


def _columns(user: User) -> dict:
    return {
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email_verified": user.email_verified,
        "profile_picture_url": user.profile_picture_url,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
        "attributes": user.attributes,
    }


class DbUserStore:
    """Implements UserStore on the caller's session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str) -> Optional[User]:
        result = await self._session.execute(select(UserRow).where(UserRow.id == user_id))
        orm = result.scalar_one_or_none()
        return _to_user(orm) if orm is not None else None

    async def insert(self, user: User) -> None:
        self._session.add(UserRow(id=user.id, **_columns(user)))
        await self._session.flush()

    async def update(self, user: User) -> None:
        await self._session.execute(
            update(UserRow).where(UserRow.id == user.id).values(**_columns(user))
        )

    async def delete(self, user_id: str) -> None:
        await self._session.execute(delete(UserRow).where(UserRow.id == user_id))
