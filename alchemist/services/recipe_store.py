"""Recipe persistence keyed by canonical key.

- Owns session boundaries; crud helpers only run statements.
- create_if_absent relies on the primary key of the recipes table, so among
  concurrent writers for one key exactly one insert succeeds and every
  other caller reads back the winner's row.
- Driver failures surface as StoreUnavailable, never as "not found".
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from alchemist.crud import CreateData, ReadData
from alchemist.errors import StoreUnavailable
from alchemist.models.schema_models import CreateResult, RecipeSchema

FEED_LIMIT = 40


class RecipeStore:
    def __init__(self, Session: async_sessionmaker):
        self.Session: async_sessionmaker = Session

    async def get(self, key: str) -> Optional[RecipeSchema]:
        """Read the recipe for a key without side effects

        Args:
            key (str): Canonical key

        Raises:
            StoreUnavailable: The backend could not answer

        Returns:
            Optional[RecipeSchema]: None only when the key is definitely absent
        """
        try:
            async with self.Session() as session:
                return await ReadData.read_recipe_data(key, session)
        except (SQLAlchemyError, OSError) as e:
            logging.error(f"Failed to read recipe {key}: {e}")
            raise StoreUnavailable(f"Failed to read recipe {key}") from e

    async def create_if_absent(self, key: str, recipe: RecipeSchema) -> CreateResult:
        """Insert the recipe unless the key is already taken

        Args:
            key (str): Canonical key, overrides recipe.key
            recipe (RecipeSchema): Candidate recipe

        Raises:
            StoreUnavailable: The insert or the read-back failed

        Returns:
            CreateResult: created=True with the stored row, or created=False with the existing row
        """
        candidate = recipe.model_copy(update={"key": key, "created_at": None})
        try:
            async with self.Session() as session:
                try:
                    stored = await CreateData.create_recipe_data(candidate, session)
                    logging.info(f"Stored new recipe {key} -> {stored.name}")
                    return CreateResult(created=True, recipe=stored)
                except IntegrityError:
                    await session.rollback()
                    logging.info(f"Recipe {key} already exists, reading the stored one")
                existing = await ReadData.read_recipe_data(key, session)
        except (SQLAlchemyError, OSError) as e:
            logging.error(f"Failed to create recipe {key}: {e}")
            raise StoreUnavailable(f"Failed to create recipe {key}") from e

        if existing is None:
            # Rows are never deleted in normal operation
            raise StoreUnavailable(f"Recipe {key} conflicted but could not be read back")
        return CreateResult(created=False, recipe=existing)

    async def recent(self, limit: int = FEED_LIMIT) -> List[RecipeSchema]:
        try:
            async with self.Session() as session:
                return await ReadData.read_recent_recipe_data(limit, session)
        except (SQLAlchemyError, OSError) as e:
            logging.error(f"Failed to read recent recipes: {e}")
            raise StoreUnavailable("Failed to read recent recipes") from e
