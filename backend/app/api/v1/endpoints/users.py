"""
Trading Simulator - User Administration Endpoints

Admin only.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status

from app.core.users import UserService
from app.dependencies import get_current_admin, get_user_service
from app.db.models.user import User
from app.schemas.user import User as UserSchema, UserUpdate

router = APIRouter()


@router.get("/", response_model=List[UserSchema])
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: User = Depends(get_current_admin),
    users: UserService = Depends(get_user_service),
):
    return [UserSchema.model_validate(u) for u in await users.list_users(skip=skip, limit=limit)]


@router.get("/{user_id}", response_model=UserSchema)
async def get_user(
    user_id: int,
    admin: User = Depends(get_current_admin),
    users: UserService = Depends(get_user_service),
):
    return UserSchema.model_validate(await users.get_user(user_id))


@router.put("/{user_id}", response_model=UserSchema)
async def update_user(
    user_id: int,
    data: UserUpdate,
    admin: User = Depends(get_current_admin),
    users: UserService = Depends(get_user_service),
):
    user = await users.update_user(
        user_id,
        username=data.username,
        email=data.email,
        password=data.password,
    )
    return UserSchema.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    admin: User = Depends(get_current_admin),
    users: UserService = Depends(get_user_service),
):
    await users.delete_user(user_id)
