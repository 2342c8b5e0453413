"""Combination resolution: lookup, synthesis on miss, write-once, attribution.

    Resolving -> Found
    Resolving -> Synthesizing -> Attributed | Superseded | SynthesisFailed

No lock is held across the model call. The only cross-caller coordination
is RecipeStore.create_if_absent: for one key exactly one caller sees
created=True and every other caller is handed the winner's recipe.
"""

import asyncio
import logging
from typing import Optional

from alchemist.converter import DataConverter
from alchemist.domain.canonical_key import canonicalize
from alchemist.errors import ResolutionError, ResolutionFailure, StoreUnavailable, SynthesisError
from alchemist.models.dc_models import ResolutionOutcome, ResolvedRecipeModel, SynthesizedElementModel
from alchemist.services.discovery_ledger import DiscoveryLedger
from alchemist.services.feed import FeedPublisher
from alchemist.services.recipe_store import RecipeStore
from alchemist.services.synthesizer import ElementSynthesizer
from alchemist.services.user_directory import UserDirectory

UNKNOWN_CREATOR = "Unknown"

data_converter = DataConverter()


class RecipeResolver:
    def __init__(
        self,
        store: RecipeStore,
        synthesizer: ElementSynthesizer,
        ledger: DiscoveryLedger,
        users: Optional[UserDirectory] = None,
        publisher: Optional[FeedPublisher] = None,
    ):
        self.store = store
        self.synthesizer = synthesizer
        self.ledger = ledger
        self.users = users
        self.publisher = publisher

    async def resolve(
        self, first: str, second: str, user_id: str, creator_name: Optional[str] = None
    ) -> ResolvedRecipeModel:
        """Resolve the element produced by combining two names

        Args:
            first (str): First element name
            second (str): Second element name
            user_id (str): Requesting user, credited if they persist a new recipe
            creator_name (Optional[str], optional): Display name to store. Looked up when omitted.

        Raises:
            ResolutionError: store_unavailable or synthesis_failed. Nothing was persisted
                by this call and the caller should restore both inputs.

        Returns:
            ResolvedRecipeModel: The global recipe for the pair
        """
        key = canonicalize(first, second)

        try:
            existing = await self.store.get(key)
        except StoreUnavailable as e:
            # Without a definite miss, synthesizing could create a rival recipe
            raise ResolutionError(ResolutionFailure.store_unavailable, str(e)) from e

        if existing is not None:
            logging.info(f"Recipe found for {key}: {existing.name}")
            return data_converter.convert_recipeschema_to_resolved(
                existing, user_id, ResolutionOutcome.found
            )

        logging.info(f"No recipe for {key}, synthesizing")
        try:
            element = await self.synthesizer.synthesize(first, second)
        except SynthesisError as e:
            logging.warning(f"Synthesis failed for {key}: {e}")
            raise ResolutionError(ResolutionFailure.synthesis_failed, str(e)) from e

        try:
            name = creator_name or await self._creator_name(user_id)
            # Once the insert is under way, finish it and its attribution even
            # if the caller goes away.
            return await asyncio.shield(self._persist(key, element, user_id, name))
        except StoreUnavailable as e:
            raise ResolutionError(ResolutionFailure.store_unavailable, str(e)) from e

    async def _creator_name(self, user_id: str) -> str:
        if self.users is None:
            return UNKNOWN_CREATOR
        return await self.users.display_name(user_id) or UNKNOWN_CREATOR

    async def _persist(
        self, key: str, element: SynthesizedElementModel, user_id: str, creator_name: str
    ) -> ResolvedRecipeModel:
        candidate = data_converter.convert_element_to_recipeschema(key, element, user_id, creator_name)
        result = await self.store.create_if_absent(key, candidate)

        if not result.created:
            logging.info(
                f"Lost the race for {key}: discarding {element.name}, keeping {result.recipe.name}"
            )
            return data_converter.convert_recipeschema_to_resolved(
                result.recipe, user_id, ResolutionOutcome.superseded
            )

        logging.info(f"First discovery of {result.recipe.name} ({key}) by {user_id}")
        await self.ledger.increment_discovery_count(user_id)
        if self.publisher is not None:
            await self.publisher.publish(result.recipe)
        return data_converter.convert_recipeschema_to_resolved(
            result.recipe, user_id, ResolutionOutcome.attributed
        )
