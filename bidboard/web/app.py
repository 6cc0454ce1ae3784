from __future__ import annotations
import logging, os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fasthtml.common import fast_app, Script
from monsterui.all import Theme

from .api import api as api_app, close_client
from .ui import add_ui_routes

LOG_LEVEL = os.getenv("BIDBOARD_LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s -- %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("bidboard_web")


hdrs = Theme.blue.headers() + [
    Script(src="https://cdn.jsdelivr.net/npm/htmx.org@2.0.2/dist/htmx.min.js"),
]


@asynccontextmanager
async def lifespan(_app):
    logger.info("bidboard web started")
    yield
    await close_client()


ui_app, rt = fast_app(hdrs=hdrs, lifespan=lifespan)
add_ui_routes(ui_app, rt)


api = FastAPI(title="bidboard API", version="1.0.0")
api.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ALLOW_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
api.mount("", api_app)
ui_app.mount("/api", api)


app = ui_app
