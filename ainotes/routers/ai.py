"""
Router pour les endpoints IA (Gemini).

Endpoints:
- POST /api/gemini - Générer des blocks à partir d'un prompt
- POST /api/summarize - Résumer / expliquer / structurer un contenu

Contrat externe : les erreurs sont renvoyées sous la forme {"error": "..."}.
"""

import asyncio
import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from ainotes.services.ai_service import AIServiceUnavailable, generate_blocks, summarize

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ai"])


async def _read_json(request: Request):
    try:
        return await request.json()
    except ValueError:
        return None


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@router.post("/gemini")
async def generate(request: Request):
    """
    Générer des blocks.

    exemple:
    POST /api/gemini
    {"prompt": "Plan de révision"}
    →
    {"blocks": [{"type": "heading", "content": "...", "metadata": {"level": 2}}, ...]}
    """
    payload = await _read_json(request)
    prompt = payload.get("prompt") if isinstance(payload, dict) else None

    if not prompt or not isinstance(prompt, str):
        return _error(status.HTTP_400_BAD_REQUEST, "Prompt is required and must be a string")

    try:
        blocks, message = await asyncio.to_thread(generate_blocks, prompt)
    except Exception as e:
        logger.error(f"Gemini API error: {e}")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to generate content",
            details=str(e) or "Unknown error",
        )

    body = {"blocks": blocks}
    if message:
        body["message"] = message
    return body


@router.post("/summarize")
async def summarize_content(request: Request):
    payload = await _read_json(request)
    content = payload.get("content") if isinstance(payload, dict) else None
    mode = (payload.get("type") if isinstance(payload, dict) else None) or "summarize"

    if not content or not isinstance(content, str):
        return _error(status.HTTP_400_BAD_REQUEST, "Content is required")
    if not isinstance(mode, str):
        return _error(status.HTTP_400_BAD_REQUEST, "Type must be a string")

    try:
        summary = await asyncio.to_thread(summarize, content, mode)
    except AIServiceUnavailable as e:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, str(e))
    except Exception as e:
        logger.error(f"Error generating summary: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate summary")

    return {"summary": summary}
