import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from redis.asyncio import Redis

from alchemist.converter import DataConverter
from alchemist.dependencies import get_recipe_resolver, get_recipe_store, get_redis
from alchemist.domain.canonical_key import canonicalize
from alchemist.errors import ResolutionError, ResolutionFailure, StoreUnavailable
from alchemist.models.dc_models import (
    CombineRequestModel,
    FeedEntryModel,
    ResolutionOutcome,
    ResolvedRecipeModel,
)
from alchemist.services.feed import FeedSubscriber, recent_entries
from alchemist.services.recipe_store import FEED_LIMIT, RecipeStore
from alchemist.services.resolver import RecipeResolver

recipe_router = APIRouter()
data_converter = DataConverter()


class CombineAPI:
    @staticmethod
    @recipe_router.post("/combine", response_model=ResolvedRecipeModel)
    async def combine(
        request: CombineRequestModel,
        resolver: RecipeResolver = Depends(get_recipe_resolver),
    ):
        try:
            return await resolver.resolve(
                request.first,
                request.second,
                request.user_id,
                creator_name=request.creator_name,
            )
        except ResolutionError as e:
            logging.error(f"Failed to combine {request.first} + {request.second}: {e}")
            if e.reason == ResolutionFailure.synthesis_failed:
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.reason.value)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.reason.value)


class RecipeAPI:
    @staticmethod
    @recipe_router.get("/recipes/{first}/{second}", response_model=ResolvedRecipeModel)
    async def get_recipe(
        first: str,
        second: str,
        user_id: str = "",
        store: RecipeStore = Depends(get_recipe_store),
    ):
        key = canonicalize(first, second)
        try:
            recipe = await store.get(key)
        except StoreUnavailable as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        if recipe is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not discovered yet")
        return data_converter.convert_recipeschema_to_resolved(recipe, user_id, ResolutionOutcome.found)


class FeedAPI:
    @staticmethod
    @recipe_router.get("/feed", response_model=List[FeedEntryModel])
    async def get_feed(
        limit: int = Query(FEED_LIMIT, ge=1, le=100),
        store: RecipeStore = Depends(get_recipe_store),
    ):
        try:
            return await recent_entries(store, limit)
        except StoreUnavailable as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    @staticmethod
    @recipe_router.get("/feed/stream")
    async def stream_feed(
        store: RecipeStore = Depends(get_recipe_store),
        redis: Optional[Redis] = Depends(get_redis),
    ):
        if redis is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Live feed is not configured",
            )
        subscriber = FeedSubscriber(store, redis)
        return StreamingResponse(subscriber.event_generator(), media_type="text/event-stream")
