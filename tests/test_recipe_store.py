import asyncio

import pytest

from alchemist.errors import StoreUnavailable
from alchemist.models.schema_models import RecipeSchema
from alchemist.services.recipe_store import RecipeStore


def recipe(name: str, created_by: str = "u1", key: str = "agua_fuego") -> RecipeSchema:
    return RecipeSchema(
        key=key,
        name=name,
        emoji="💨",
        color="#CCCCCC",
        created_by=created_by,
        creator_name=created_by.upper(),
    )


async def test_get_missing_key_returns_none(store):
    assert await store.get("agua_fuego") is None


async def test_create_then_get(store):
    result = await store.create_if_absent("agua_fuego", recipe("Vapor"))

    assert result.created is True
    assert result.recipe.name == "Vapor"
    assert result.recipe.created_at is not None

    stored = await store.get("agua_fuego")
    assert stored.name == "Vapor"
    assert stored.created_by == "u1"
    assert stored.created_at == result.recipe.created_at


async def test_key_argument_wins_over_recipe_key(store):
    await store.create_if_absent("agua_fuego", recipe("Vapor", key="something_else"))
    assert await store.get("agua_fuego") is not None
    assert await store.get("something_else") is None


async def test_second_create_returns_existing_and_keeps_it(store):
    await store.create_if_absent("agua_fuego", recipe("Vapor", "u1"))
    result = await store.create_if_absent("agua_fuego", recipe("Niebla", "u2"))

    assert result.created is False
    assert result.recipe.name == "Vapor"
    assert result.recipe.created_by == "u1"
    assert (await store.get("agua_fuego")).name == "Vapor"


async def test_concurrent_creates_have_one_winner(store):
    candidates = [recipe(f"Vapor{i}", f"u{i}") for i in range(8)]

    results = await asyncio.gather(*(store.create_if_absent("agua_fuego", c) for c in candidates))

    winners = [r for r in results if r.created]
    assert len(winners) == 1
    winner = winners[0].recipe
    assert all(r.recipe.name == winner.name for r in results)
    assert (await store.get("agua_fuego")).name == winner.name


async def test_recent_is_newest_first(store):
    await store.create_if_absent("a_b", recipe("Old", key="a_b"))
    await asyncio.sleep(1.1)  # server timestamps have second resolution on sqlite
    await store.create_if_absent("c_d", recipe("New", key="c_d"))

    recent = await store.recent(limit=40)
    assert [r.name for r in recent] == ["New", "Old"]
    assert [r.name for r in await store.recent(limit=1)] == ["New"]


async def test_backend_failure_is_not_a_miss(broken_Session):
    store = RecipeStore(broken_Session)

    with pytest.raises(StoreUnavailable):
        await store.get("agua_fuego")
    with pytest.raises(StoreUnavailable):
        await store.create_if_absent("agua_fuego", recipe("Vapor"))
    with pytest.raises(StoreUnavailable):
        await store.recent()
