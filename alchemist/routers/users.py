from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from alchemist.dependencies import get_discovery_ledger, get_user_directory
from alchemist.errors import StoreUnavailable, UsernameTaken
from alchemist.models.dc_models import (
    LeaderboardEntryModel,
    UserRegisterModel,
    UsernameAvailabilityModel,
)
from alchemist.models.schema_models import UserSchema
from alchemist.services.discovery_ledger import LEADERBOARD_LIMIT, DiscoveryLedger
from alchemist.services.user_directory import UserDirectory

user_router = APIRouter()


class UserAPI:
    @staticmethod
    @user_router.post("/users", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
    async def register_user(
        request: UserRegisterModel,
        users: UserDirectory = Depends(get_user_directory),
    ):
        try:
            return await users.register(request.username, user_id=request.user_id)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
        except UsernameTaken:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
        except StoreUnavailable as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    @staticmethod
    @user_router.get("/users/check_username", response_model=UsernameAvailabilityModel)
    async def check_username(
        username: str,
        users: UserDirectory = Depends(get_user_directory),
    ):
        name = username.strip()
        try:
            taken = await users.is_username_taken(name)
        except StoreUnavailable as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        return UsernameAvailabilityModel(username=name, available=bool(name) and not taken)

    @staticmethod
    @user_router.get("/users/{user_id}", response_model=UserSchema)
    async def get_user(
        user_id: str,
        users: UserDirectory = Depends(get_user_directory),
    ):
        try:
            user = await users.get(user_id)
        except StoreUnavailable as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user


class LeaderboardAPI:
    @staticmethod
    @user_router.get("/leaderboard", response_model=List[LeaderboardEntryModel])
    async def get_leaderboard(
        limit: int = Query(LEADERBOARD_LIMIT, ge=1, le=100),
        ledger: DiscoveryLedger = Depends(get_discovery_ledger),
    ):
        try:
            return await ledger.get_leaderboard(limit)
        except StoreUnavailable as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
