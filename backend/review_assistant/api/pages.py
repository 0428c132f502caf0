"""Static page routes."""

import logging
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

logger = logging.getLogger(__name__)
router = APIRouter()

INDEX_PATH = Path(__file__).resolve().parent.parent / "static" / "index.html"
FALLBACK_PAGE = "<html><body><h1>Error loading page</h1></body></html>"


def load_index_page(path: Path = INDEX_PATH) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Could not read %s: %s", path, exc)
        return FALLBACK_PAGE


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index() -> HTMLResponse:
    return HTMLResponse(load_index_page())
