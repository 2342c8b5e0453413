from typing import List

from alchemist.domain.canonical_key import split_key
from alchemist.domain.color import DEFAULT_FEED_COLOR, normalize_color_hex
from alchemist.models.dc_models import (
    FeedEntryModel,
    LeaderboardEntryModel,
    ResolutionOutcome,
    ResolvedRecipeModel,
    SynthesizedElementModel,
)
from alchemist.models.schema_models import RecipeSchema, UserSchema

UNKNOWN_USERNAME = "???"


class DataConverter:
    """This class is used to convert data between stored rows and client models."""

    def convert_element_to_recipeschema(
        self, key: str, element: SynthesizedElementModel, user_id: str, creator_name: str
    ) -> RecipeSchema:
        """Build the row to insert for a freshly synthesized element

        Args:
            key (str): Canonical key of the pair
            element (SynthesizedElementModel): Validated model output
            user_id (str): Requesting user, credited if the insert wins
            creator_name (str): Display name stored next to the recipe

        Returns:
            RecipeSchema: Recipe without created_at, which the database assigns
        """
        return RecipeSchema(
            key=key,
            name=element.name,
            emoji=element.emoji,
            color=element.color_hex,
            created_by=user_id,
            creator_name=creator_name,
        )

    def convert_recipeschema_to_resolved(
        self, recipe: RecipeSchema, user_id: str, outcome: ResolutionOutcome
    ) -> ResolvedRecipeModel:
        """Convert a stored recipe to the client response of a combination

        Args:
            recipe (RecipeSchema): Stored recipe
            user_id (str): The user who asked for the combination
            outcome (ResolutionOutcome): How the recipe was obtained

        Returns:
            ResolvedRecipeModel: First discovery is true for the caller that persisted it
                or for the stored creator reading it back
        """
        return ResolvedRecipeModel(
            key=recipe.key,
            name=recipe.name,
            emoji=recipe.emoji,
            color_hex=normalize_color_hex(recipe.color, fallback=DEFAULT_FEED_COLOR),
            created_by=recipe.created_by,
            creator_name=recipe.creator_name or "",
            created_at=recipe.created_at,
            is_first_discovery=(
                outcome == ResolutionOutcome.attributed
                or (bool(user_id) and recipe.created_by == user_id)
            ),
            outcome=outcome,
        )

    def convert_recipeschema_to_feed_entry(self, recipe: RecipeSchema) -> FeedEntryModel:
        first_ingredient, second_ingredient = split_key(recipe.key)
        return FeedEntryModel(
            key=recipe.key,
            name=recipe.name,
            emoji=recipe.emoji,
            color_hex=normalize_color_hex(recipe.color, fallback=DEFAULT_FEED_COLOR),
            creator_name=recipe.creator_name or "",
            created_at=recipe.created_at,
            first_ingredient=first_ingredient,
            second_ingredient=second_ingredient,
        )

    def convert_users_to_leaderboard(self, users: List[UserSchema]) -> List[LeaderboardEntryModel]:
        """Number users from 1 in the order given"""
        return [
            LeaderboardEntryModel(
                rank=index + 1,
                user_id=user.user_id,
                username=user.username or UNKNOWN_USERNAME,
                count=user.discovery_count,
            )
            for index, user in enumerate(users)
        ]
