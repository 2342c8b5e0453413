from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from alchemist.domain.color import normalize_color_hex
from alchemist.domain.element_rules import validate_element_emoji, validate_element_name


class ResolutionOutcome(str, Enum):
    found = "found"  # recipe already existed
    attributed = "attributed"  # this caller persisted it first
    superseded = "superseded"  # another caller's concurrent write won


class CombineRequestModel(BaseModel):
    first: str
    second: str
    user_id: str
    creator_name: Optional[str] = None


class SynthesizedElementModel(BaseModel):
    """Element proposed by the language model, validated before it reaches the store."""
    name: str
    emoji: str
    color_hex: str = Field(alias="colorHex")

    @field_validator("name", "emoji", "color_hex", mode="before")
    @classmethod
    def _require_string(cls, value):
        if not isinstance(value, str):
            raise ValueError("must be a string")
        return value

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return validate_element_name(value)

    @field_validator("emoji")
    @classmethod
    def _check_emoji(cls, value: str) -> str:
        return validate_element_emoji(value)

    @field_validator("color_hex")
    @classmethod
    def _check_color(cls, value: str) -> str:
        return normalize_color_hex(value)


class ResolvedRecipeModel(BaseModel):
    key: str
    name: str
    emoji: str
    color_hex: str
    created_by: Optional[str] = None
    creator_name: str
    created_at: Optional[datetime] = None
    is_first_discovery: bool
    outcome: ResolutionOutcome


class FeedEntryModel(BaseModel):
    key: str
    name: str
    emoji: str
    color_hex: str
    creator_name: str
    created_at: Optional[datetime] = None
    first_ingredient: str
    second_ingredient: str


class LeaderboardEntryModel(BaseModel):
    rank: int
    user_id: str
    username: str
    count: int


class UserRegisterModel(BaseModel):
    username: str
    user_id: Optional[str] = None


class UsernameAvailabilityModel(BaseModel):
    username: str
    available: bool
