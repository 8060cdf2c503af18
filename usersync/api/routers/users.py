"""Users router: read access to the mirror. Never writes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from usersync.api.dependencies import get_uow_factory
from usersync.application.repositories import UnitOfWorkFactory
from usersync.domain.exceptions import UserNotFoundError
from usersync.domain.schemas.event import UserResponse

router = APIRouter()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)] = ...,
):
    """Get a mirrored user by provider subject id."""
    async with uow_factory() as uow:
        user = await uow.users.get(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return UserResponse.model_validate(user)
