import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from alchemist.crud import CreateData
from alchemist.db import engine
from alchemist.dependencies import discovery_ledger, redis, synthesizer
from alchemist.errors import StoreUnavailable
from alchemist.load_secrets import reconcile_interval_minutes
from alchemist.routers import recipes, users

scheduler = AsyncIOScheduler()
logging.basicConfig(level=logging.INFO)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)


async def reconcile_discovery_counts() -> None:
    """Repair counters whose best-effort increment was lost"""
    try:
        await discovery_ledger.reconcile()
    except StoreUnavailable as e:
        logging.warning(f"Skipping discovery count reconcile: {e}")


@asynccontextmanager
async def lifespan(app):
    """Create tables and start the reconcile job.
    This function is called to start the server.
    """
    await CreateData.create_table(engine)

    scheduler.add_job(
        reconcile_discovery_counts,
        "interval",
        minutes=reconcile_interval_minutes,
    )
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()
        await synthesizer.aclose()
        if redis is not None:
            await redis.aclose()
        await engine.dispose()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.include_router(recipes.recipe_router)
app.include_router(users.user_router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8080)
