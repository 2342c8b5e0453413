"""Player identities and display names.

The username check is a read followed by a separate write with no
uniqueness constraint behind it, so two players registering the same
name at the same moment can both succeed.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from uuid6 import uuid7

from alchemist.crud import CreateData, ReadData, UpdateData
from alchemist.errors import StoreUnavailable, UsernameTaken
from alchemist.models.schema_models import UserSchema


class UserDirectory:
    def __init__(self, Session: async_sessionmaker):
        self.Session: async_sessionmaker = Session

    async def get(self, user_id: str) -> Optional[UserSchema]:
        try:
            async with self.Session() as session:
                return await ReadData.read_user_data(user_id, session)
        except (SQLAlchemyError, OSError) as e:
            logging.error(f"Failed to read user {user_id}: {e}")
            raise StoreUnavailable(f"Failed to read user {user_id}") from e

    async def display_name(self, user_id: str) -> Optional[str]:
        if not user_id:
            return None
        user = await self.get(user_id)
        if user is None:
            return None
        return user.username

    async def is_username_taken(self, username: str, exclude_user_id: Optional[str] = None) -> bool:
        """Check whether another user already holds the exact username

        Args:
            username (str): Username, compared case-sensitively
            exclude_user_id (Optional[str], optional): The user renaming themself. Defaults to None.

        Returns:
            bool: True if a different user holds it
        """
        try:
            async with self.Session() as session:
                holders = await ReadData.read_user_id_by_username(username, session)
        except (SQLAlchemyError, OSError) as e:
            logging.error(f"Failed to check username {username}: {e}")
            raise StoreUnavailable(f"Failed to check username {username}") from e
        return any(holder != exclude_user_id for holder in holders)

    async def register(self, username: str, user_id: Optional[str] = None) -> UserSchema:
        """Claim a username for a user, creating the user if needed

        Args:
            username (str): Requested name, surrounding whitespace is dropped
            user_id (Optional[str], optional): Existing id. A UUIDv7 is generated when omitted.

        Raises:
            ValueError: The name is blank
            UsernameTaken: Another user already holds the name
            StoreUnavailable: The backend failed

        Returns:
            UserSchema: The stored user, discovery count preserved
        """
        name = username.strip()
        if not name:
            raise ValueError("username must not be empty")
        user_id = user_id or str(uuid7())

        if await self.is_username_taken(name, exclude_user_id=user_id):
            raise UsernameTaken(name)

        try:
            async with self.Session() as session:
                if not await UpdateData.update_username(user_id, name, session):
                    try:
                        await CreateData.create_user_data(
                            UserSchema(user_id=user_id, username=name), session
                        )
                    except IntegrityError:
                        await session.rollback()
                        await UpdateData.update_username(user_id, name, session)
                user = await ReadData.read_user_data(user_id, session)
        except (SQLAlchemyError, OSError) as e:
            logging.error(f"Failed to register user {user_id}: {e}")
            raise StoreUnavailable(f"Failed to register user {user_id}") from e

        logging.info(f"Registered {name} as {user_id}")
        return user
