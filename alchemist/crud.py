from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy import select, desc, asc, update, func
from typing import Dict, List, Optional

from alchemist.models.schema_models import RecipeSchema, UserSchema
from alchemist.models.schemas import Base, RecipeTable, UserTable


# Helpers run statements on a session owned by the caller. They do not
# catch driver errors; the service layer maps those to StoreUnavailable.


class ReadData:
    @staticmethod
    async def read_recipe_data(key: str, session: AsyncSession) -> Optional[RecipeSchema]:
        """Read the recipe stored under a canonical key

        Args:
            key (str): Canonical key of the element pair
            session (AsyncSession): AsyncSession object to interact with database

        Returns:
            Optional[RecipeSchema]: Stored recipe, None if the pair was never resolved
        """
        stmt = select(RecipeTable).where(RecipeTable.key == key)
        result = await session.execute(stmt)
        result = result.scalars().first()

        if result is None:
            return None
        return RecipeSchema.model_validate(result)

    @staticmethod
    async def read_recent_recipe_data(limit: int, session: AsyncSession) -> List[RecipeSchema]:
        """Read the newest recipes for the discovery feed

        Args:
            limit (int): Maximum number of recipes
            session (AsyncSession): AsyncSession object to interact with database

        Returns:
            List[RecipeSchema]: Recipes ordered by created_at, newest first
        """
        stmt = (
            select(RecipeTable)
            .order_by(desc(RecipeTable.created_at), asc(RecipeTable.key))
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [RecipeSchema.model_validate(row) for row in result.scalars().all()]

    @staticmethod
    async def read_user_data(user_id: str, session: AsyncSession) -> Optional[UserSchema]:
        stmt = select(UserTable).where(UserTable.user_id == user_id)
        result = await session.execute(stmt)
        result = result.scalars().first()

        if result is None:
            return None
        return UserSchema.model_validate(result)

    @staticmethod
    async def read_user_id_by_username(username: str, session: AsyncSession) -> List[str]:
        """Read the ids of users holding a username (case-sensitive match)

        Args:
            username (str): Exact username to look for
            session (AsyncSession): AsyncSession object to interact with database

        Returns:
            List[str]: user_id of every matching user
        """
        stmt = select(UserTable.user_id).where(UserTable.username == username)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def read_leaderboard_data(limit: int, session: AsyncSession) -> List[UserSchema]:
        """Read users with at least one first discovery, best first

        Args:
            limit (int): Maximum number of users
            session (AsyncSession): AsyncSession object to interact with database

        Returns:
            List[UserSchema]: Ordered by discovery_count desc, user_id asc
        """
        stmt = (
            select(UserTable)
            .where(UserTable.discovery_count > 0)
            .order_by(desc(UserTable.discovery_count), asc(UserTable.user_id))
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [UserSchema.model_validate(row) for row in result.scalars().all()]


class CreateData:
    @staticmethod
    async def create_table(engine: AsyncEngine) -> None:
        """Create tables if not exists"""
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @staticmethod
    async def create_recipe_data(recipe: RecipeSchema, session: AsyncSession) -> RecipeSchema:
        """Insert a recipe row. Raises IntegrityError if the key already exists

        Args:
            recipe (RecipeSchema): Recipe to store, created_at is ignored
            session (AsyncSession): AsyncSession object to interact with database

        Returns:
            RecipeSchema: Stored recipe including the server-assigned created_at
        """
        new_recipe = RecipeTable(
            key=recipe.key,
            name=recipe.name,
            emoji=recipe.emoji,
            color=recipe.color,
            created_by=recipe.created_by,
            creator_name=recipe.creator_name,
        )
        session.add(new_recipe)
        await session.commit()
        await session.refresh(new_recipe)
        return RecipeSchema.model_validate(new_recipe)

    @staticmethod
    async def create_user_data(user: UserSchema, session: AsyncSession) -> None:
        """Insert a user row. Raises IntegrityError if the user already exists"""
        new_user = UserTable(
            user_id=user.user_id,
            username=user.username,
            discovery_count=user.discovery_count,
        )
        session.add(new_user)
        await session.commit()
        await session.refresh(new_user)


class UpdateData:
    @staticmethod
    async def increment_discovery_count(user_id: str, session: AsyncSession) -> bool:
        """Atomically add one to the user's discovery_count

        Returns:
            bool: False if the user row does not exist
        """
        stmt = (
            update(UserTable)
            .where(UserTable.user_id == user_id)
            .values(discovery_count=UserTable.discovery_count + 1)
        )
        result = await session.execute(stmt)
        await session.commit()
        return result.rowcount > 0

    @staticmethod
    async def update_username(user_id: str, username: str, session: AsyncSession) -> bool:
        """Set the username and reset joined_at to the server time

        Returns:
            bool: False if the user row does not exist
        """
        stmt = (
            update(UserTable)
            .where(UserTable.user_id == user_id)
            .values(username=username, joined_at=func.now())
        )
        result = await session.execute(stmt)
        await session.commit()
        return result.rowcount > 0

    @staticmethod
    async def update_discovery_counts(counts: Dict[str, int], session: AsyncSession) -> int:
        """Overwrite discovery_count for every user, missing users count zero

        Args:
            counts (Dict[str, int]): user_id -> number of recipes they created

        Returns:
            int: Number of users whose stored count changed
        """
        result = await session.execute(select(UserTable))
        changed = 0
        seen = set()
        for row in result.scalars().all():
            seen.add(row.user_id)
            expected = counts.get(row.user_id, 0)
            if row.discovery_count != expected:
                row.discovery_count = expected
                changed += 1
        # Creators that never registered a username still get a row
        for user_id, count in counts.items():
            if user_id not in seen:
                session.add(UserTable(user_id=user_id, discovery_count=count))
                changed += 1
        await session.commit()
        return changed


class CollectID:
    @staticmethod
    async def collect_discovery_counts(session: AsyncSession) -> Dict[str, int]:
        """Count recipes per creator, the source of truth for discovery counts

        Returns:
            Dict[str, int]: created_by -> number of recipes
        """
        stmt = (
            select(RecipeTable.created_by, func.count(RecipeTable.key))
            .where(RecipeTable.created_by.is_not(None))
            .where(RecipeTable.created_by != "")
            .group_by(RecipeTable.created_by)
        )
        result = await session.execute(stmt)
        return {created_by: count for created_by, count in result.all()}
