from contextlib import asynccontextmanager
from typing import Optional
import asyncio
import logging

from fastapi import FastAPI

from taixiu.api.routes import router
from taixiu.config import Settings, settings as default_settings
from taixiu.services import Feed
from taixiu.sources.upstream import UpstreamError

logger = logging.getLogger(__name__)


async def poll_forever(feed: Feed, interval: float):
    """Fetch off the event loop; mutate the session on it, one batch at a time."""
    while True:
        try:
            records = await asyncio.to_thread(feed.fetch)
            feed.sync(records)
        except UpstreamError as e:
            logger.warning(f"Upstream unavailable, retrying next poll: {e}")
        except Exception:
            logger.exception("Poll failed, retrying next poll")
        await asyncio.sleep(interval)


def create_app(feed: Optional[Feed] = None, poll: bool = True, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or (feed.settings if feed else default_settings)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    feed = feed or Feed(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if poll:
            task = asyncio.create_task(poll_forever(feed, settings.poll_interval))
            logger.info(f"Polling {settings.upstream_url} every {settings.poll_interval}s")
        yield
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.info("Poller stopped")
        feed.session.dispose()

    app = FastAPI(title="TaiXiu Ensemble", lifespan=lifespan)
    app.state.feed = feed
    app.include_router(router)
    return app
