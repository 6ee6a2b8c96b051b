"""
Service Gemini - appels HTTP à l'API Google Generative Language
"""

import json
import logging
import re
from typing import Any, Optional

import requests

from ainotes.core.config import settings

logger = logging.getLogger(__name__)

STUB_MESSAGE = "This is a stub response. Set GEMINI_API_KEY to enable real AI generation."

BLOCKS_INSTRUCTION = """Convert the following user prompt into structured blocks for a note-taking app.
Return a JSON array of blocks where each block has a 'type' (text, heading, list, code, image),
'content' (the text content), and optional 'metadata' (like level for headings, language for code).

User prompt: {prompt}

Please format your response as valid JSON only."""

SUMMARY_PROMPTS = {
    "summarize": "Please provide a concise summary of the following content:\n\n{content}",
    "explain": "Please explain the following content in simple terms:\n\n{content}",
    "outline": "Please create an outline of the following content:\n\n{content}",
}
DEFAULT_SUMMARY_PROMPT = "Please summarize the following content:\n\n{content}"

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class AIServiceUnavailable(Exception):
    pass


def is_gemini_configured() -> bool:
    return bool(settings.GEMINI_API_KEY)


def generate_text(prompt: str, model: Optional[str] = None) -> str:
    if not is_gemini_configured():
        raise AIServiceUnavailable("GEMINI_API_KEY is not set")

    model = model or settings.GEMINI_MODEL
    try:
        response = requests.post(
            f"{settings.GEMINI_BASE_URL}/models/{model}:generateContent",
            params={"key": settings.GEMINI_API_KEY},
            json={"contents": [{"parts": [{"text": prompt}]}]},
            timeout=settings.AI_REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        data = response.json()

        candidates = data.get("candidates") or []
        if not candidates:
            raise ValueError("Gemini returned no candidates")
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(part.get("text", "") for part in parts).strip()

    except Exception as e:
        logger.error(f"Gemini error: {e}")
        raise


def sample_blocks(prompt: str) -> list[dict[str, Any]]:
    # réponse de démo quand aucune clé API n'est configurée
    return [
        {
            "type": "heading",
            "content": "AI-Generated Response",
            "metadata": {"level": 2},
        },
        {
            "type": "text",
            "content": (
                f"Here's a response to your prompt: \"{prompt}\". This is a placeholder response "
                "from the Gemini API stub. In a real implementation, this would be generated "
                "content from Google's Gemini AI model."
            ),
        },
        {
            "type": "list",
            "content": "• Key point one about your request\n• Another relevant detail\n• Summary conclusion",
        },
    ]


def parse_blocks(text: str) -> list[dict[str, Any]]:
    """Parse la réponse du modèle. Si ce n'est pas du JSON exploitable -> un seul block texte"""
    cleaned = text.strip()
    fence = _FENCE_RE.match(cleaned)
    if fence:
        cleaned = fence.group(1)

    try:
        parsed = json.loads(cleaned)
    except ValueError:
        logger.info("Gemini reply is not JSON, falling back to a text block")
        return [{"type": "text", "content": text}]

    if isinstance(parsed, dict) and isinstance(parsed.get("blocks"), list):
        parsed = parsed["blocks"]
    if not isinstance(parsed, list):
        return [{"type": "text", "content": text}]
    return parsed


def generate_blocks(prompt: str) -> tuple[list[dict[str, Any]], Optional[str]]:
    """Retourne (blocks, message). message n'est rempli qu'en mode démo"""
    if not is_gemini_configured():
        logger.info("GEMINI_API_KEY not set, returning sample blocks")
        return sample_blocks(prompt), STUB_MESSAGE

    text = generate_text(BLOCKS_INSTRUCTION.format(prompt=prompt))
    return parse_blocks(text), None


def summarize(content: str, mode: str = "summarize") -> str:
    template = SUMMARY_PROMPTS.get(mode, DEFAULT_SUMMARY_PROMPT)
    return generate_text(template.format(content=content))
