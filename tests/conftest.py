import asyncio
from typing import List, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from alchemist.crud import CreateData
from alchemist.errors import SynthesisError
from alchemist.models.dc_models import SynthesizedElementModel
from alchemist.services.discovery_ledger import DiscoveryLedger
from alchemist.services.recipe_store import RecipeStore
from alchemist.services.user_directory import UserDirectory


class ScriptedSynthesizer:
    """Stands in for ElementSynthesizer; returns queued elements in order."""

    def __init__(self, *elements: SynthesizedElementModel, error: Optional[Exception] = None):
        self.elements: List[SynthesizedElementModel] = list(elements)
        self.error = error
        self.calls: List[tuple] = []

    async def synthesize(self, first: str, second: str) -> SynthesizedElementModel:
        self.calls.append((first, second))
        # Yield so concurrent resolutions interleave around the model call
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        if len(self.elements) > 1:
            return self.elements.pop(0)
        return self.elements[0]


def element(name: str, emoji: str = "💨", color_hex: str = "#CCCCCC") -> SynthesizedElementModel:
    return SynthesizedElementModel(name=name, emoji=emoji, colorHex=color_hex)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'recipes.sqlite3'}")
    await CreateData.create_table(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def Session(engine):
    return async_sessionmaker(class_=AsyncSession, expire_on_commit=False, bind=engine)


@pytest.fixture
async def broken_Session(tmp_path):
    # The parent directory does not exist, so every connection attempt fails
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'recipes.sqlite3'}")
    yield async_sessionmaker(class_=AsyncSession, expire_on_commit=False, bind=engine)
    await engine.dispose()


@pytest.fixture
def store(Session):
    return RecipeStore(Session)


@pytest.fixture
def ledger(Session):
    return DiscoveryLedger(Session)


@pytest.fixture
def users(Session):
    return UserDirectory(Session)


@pytest.fixture
def synthesizer():
    return ScriptedSynthesizer(element("Vapor", "💨", "#CCCCCC"))
