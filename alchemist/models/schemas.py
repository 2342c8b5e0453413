from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import Column
from sqlalchemy.sql import func
from sqlalchemy.types import Integer, String, DateTime


class Base(DeclarativeBase):
    pass


class RecipeTable(Base):
    """One row per canonical key. Written once, never updated."""
    __tablename__ = "recipes"
    key = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    emoji = Column(String, nullable=False)
    color = Column(String)
    created_by = Column(String, index=True)
    creator_name = Column(String)
    # Assigned by the database so ordering is comparable across clients
    created_at = Column(DateTime, server_default=func.now(), index=True)


class UserTable(Base):
    __tablename__ = "users"
    user_id = Column(String, primary_key=True, index=True)
    username = Column(String, index=True)
    joined_at = Column(DateTime, server_default=func.now())
    discovery_count = Column(Integer, nullable=False, default=0, server_default="0")
