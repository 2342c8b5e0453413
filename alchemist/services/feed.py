import json
import logging
from typing import AsyncGenerator, List, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from alchemist.converter import DataConverter
from alchemist.errors import StoreUnavailable
from alchemist.models.dc_models import FeedEntryModel
from alchemist.models.schema_models import RecipeSchema
from alchemist.services.recipe_store import FEED_LIMIT, RecipeStore

FEED_CHANNEL = "recipes:feed"
POLL_SECONDS = 1.0

data_converter = DataConverter()


async def recent_entries(store: RecipeStore, limit: int = FEED_LIMIT) -> List[FeedEntryModel]:
    """Newest discoveries, with the two ingredients recovered from the key"""
    recipes = await store.recent(limit)
    return [data_converter.convert_recipeschema_to_feed_entry(recipe) for recipe in recipes]


class FeedPublisher:
    """Announce newly created recipes on a Redis channel. Best-effort."""

    def __init__(self, redis: Optional[Redis], channel: str = FEED_CHANNEL):
        self.redis: Optional[Redis] = redis
        self.channel: str = channel

    async def publish(self, recipe: RecipeSchema) -> None:
        if self.redis is None:
            return
        entry = data_converter.convert_recipeschema_to_feed_entry(recipe)
        try:
            await self.redis.publish(self.channel, entry.model_dump_json())
        except (RedisError, OSError) as e:
            logging.warning(f"Failed to publish recipe {recipe.key} to the feed: {e}")


class FeedSubscriber:
    """Redis subscriber class to handle SSE events of the discovery feed."""

    def __init__(self, store: RecipeStore, redis: Redis, channel: str = FEED_CHANNEL):
        self.store: RecipeStore = store
        self.redis: Redis = redis
        self.channel: str = channel

    async def event_generator(self) -> AsyncGenerator[str, None]:
        """Event generator to handle SSE events.

        The first event is a snapshot of the recent discoveries, then one
        event per recipe published by any server instance. If the channel
        or the snapshot cannot be read, a single error event ends the stream.
        """
        pubsub = self.redis.pubsub()
        try:
            await pubsub.subscribe(self.channel)
            snapshot = await recent_entries(self.store)
        except (StoreUnavailable, RedisError, OSError) as e:
            logging.error(f"Failed to open the discovery feed: {e}")
            await pubsub.aclose()
            yield f"event: error\ndata: {json.dumps({'detail': str(e)})}\n\n"
            return

        try:
            payload = json.dumps([entry.model_dump(mode="json") for entry in snapshot])
            yield f"event: feed_snapshot\ndata: {payload}\n\n"

            while True:
                # Poll with an explicit timeout so the client's socket_timeout
                # does not end an idle stream
                msg = await pubsub.get_message(ignore_subscribe_messages=True, timeout=POLL_SECONDS)
                if msg and msg["type"] == "message":
                    data = msg["data"]
                    if isinstance(data, bytes):
                        data = data.decode("utf-8")
                    logging.debug(f"Feed payload: {data}")
                    yield f"event: new_recipe\ndata: {data}\n\n"
        finally:
            logging.info("Unsubscribing from feed channel")
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()
