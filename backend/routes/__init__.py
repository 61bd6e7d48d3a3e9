"""FastAPI API endpoints under /api.

One endpoint: POST /api/generate — generate a story from
{"topic", "style", "length"} and return {"success", "data" | "error"}.
"""

from fastapi import APIRouter

from .generate import router as generate_router

router = APIRouter()
router.include_router(generate_router)
