"""Per-user first-discovery counters and the leaderboard built on them.

Increments are best-effort: a lost increment never affects the recipe
write it belongs to. reconcile() recomputes every counter from
recipes.created_by, which stays the source of truth.
"""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from alchemist.converter import DataConverter
from alchemist.crud import CollectID, CreateData, ReadData, UpdateData
from alchemist.errors import AttributionFailed, StoreUnavailable
from alchemist.models.dc_models import LeaderboardEntryModel
from alchemist.models.schema_models import UserSchema

LEADERBOARD_LIMIT = 20

data_converter = DataConverter()


class DiscoveryLedger:
    def __init__(self, Session: async_sessionmaker):
        self.Session: async_sessionmaker = Session

    async def increment_discovery_count(self, user_id: str) -> None:
        """Credit one first discovery to the user. Never raises

        Args:
            user_id (str): User who persisted a new recipe
        """
        if not user_id:
            logging.warning("Skipping discovery attribution for an anonymous user")
            return
        try:
            await self._increment(user_id)
        except AttributionFailed as e:
            logging.warning(f"Discovery attribution lost: {e}")

    async def _increment(self, user_id: str) -> None:
        try:
            async with self.Session() as session:
                if await UpdateData.increment_discovery_count(user_id, session):
                    return
                try:
                    await CreateData.create_user_data(
                        UserSchema(user_id=user_id, discovery_count=1), session
                    )
                    return
                except IntegrityError:
                    # The row appeared between the update and the insert
                    await session.rollback()
                if await UpdateData.increment_discovery_count(user_id, session):
                    return
        except (SQLAlchemyError, OSError) as e:
            raise AttributionFailed(f"Failed to increment discovery count of {user_id}: {e}") from e
        raise AttributionFailed(f"User {user_id} vanished while incrementing")

    async def get_count(self, user_id: str) -> int:
        try:
            async with self.Session() as session:
                user = await ReadData.read_user_data(user_id, session)
        except (SQLAlchemyError, OSError) as e:
            logging.error(f"Failed to read discovery count of {user_id}: {e}")
            raise StoreUnavailable(f"Failed to read discovery count of {user_id}") from e
        return user.discovery_count if user else 0

    async def get_leaderboard(self, limit: int = LEADERBOARD_LIMIT) -> List[LeaderboardEntryModel]:
        """Users ranked by first discoveries

        Args:
            limit (int, optional): Maximum number of entries. Defaults to 20.

        Returns:
            List[LeaderboardEntryModel]: Count desc, ties ordered by user_id
        """
        try:
            async with self.Session() as session:
                users = await ReadData.read_leaderboard_data(limit, session)
        except (SQLAlchemyError, OSError) as e:
            logging.error(f"Failed to read leaderboard: {e}")
            raise StoreUnavailable("Failed to read leaderboard") from e
        return data_converter.convert_users_to_leaderboard(users)

    async def reconcile(self) -> int:
        """Recompute every counter from the recipes each user created

        Returns:
            int: Number of users whose counter was corrected
        """
        try:
            async with self.Session() as session:
                counts = await CollectID.collect_discovery_counts(session)
                changed = await UpdateData.update_discovery_counts(counts, session)
        except (SQLAlchemyError, OSError) as e:
            logging.error(f"Failed to reconcile discovery counts: {e}")
            raise StoreUnavailable("Failed to reconcile discovery counts") from e
        if changed:
            logging.info(f"Reconciled discovery counts of {changed} users")
        return changed
