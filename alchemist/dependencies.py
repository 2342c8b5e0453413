from typing import Optional

from redis.asyncio import Redis

from alchemist.db import Session
from alchemist.load_secrets import redis_socket_timeout, redis_url
from alchemist.services.discovery_ledger import DiscoveryLedger
from alchemist.services.feed import FeedPublisher
from alchemist.services.recipe_store import RecipeStore
from alchemist.services.resolver import RecipeResolver
from alchemist.services.synthesizer import ElementSynthesizer
from alchemist.services.user_directory import UserDirectory


def create_redis(url: Optional[str], socket_timeout: float) -> Optional[Redis]:
    """Redis client for the live feed, None when no URL is configured"""
    if not url:
        return None
    return Redis.from_url(url, socket_timeout=socket_timeout, socket_connect_timeout=socket_timeout)


# The feed is optional; without REDIS_URL recipes are still served and stored.
redis: Optional[Redis] = create_redis(redis_url, redis_socket_timeout)

recipe_store = RecipeStore(Session)
discovery_ledger = DiscoveryLedger(Session)
user_directory = UserDirectory(Session)
synthesizer = ElementSynthesizer()
feed_publisher = FeedPublisher(redis)
recipe_resolver = RecipeResolver(
    recipe_store,
    synthesizer,
    discovery_ledger,
    users=user_directory,
    publisher=feed_publisher,
)


def get_recipe_store() -> RecipeStore:
    return recipe_store


def get_discovery_ledger() -> DiscoveryLedger:
    return discovery_ledger


def get_user_directory() -> UserDirectory:
    return user_directory


def get_recipe_resolver() -> RecipeResolver:
    return recipe_resolver


def get_redis() -> Optional[Redis]:
    return redis
