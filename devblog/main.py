import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from devblog.routers import auth, images, posts
from devblog.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.http_client = httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT)
    logger.info("GitHub HTTP client opened")

    try:
        yield
    finally:
        await app.state.http_client.aclose()
        logger.info("GitHub HTTP client closed")


app = FastAPI(
    title="DevBlog API",
    description="Markdown blog stored in your GitHub repository",
    lifespan=lifespan,
)

app.include_router(auth.router)
app.include_router(posts.router)
app.include_router(images.router)


@app.get("/")
async def root():
    return {"message": "DevBlog API is running"}
