"""
Clients de génération utilisés par le PromptDispatcher.

Les deux retournent le corps brut de la réponse ({"blocks": [...]}) ;
la validation est faite par le dispatcher.
"""

import asyncio
import logging
from typing import Any, Protocol

import requests

from ainotes.core.config import settings
from ainotes.services import ai_service

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    pass


class GenerationClient(Protocol):
    async def generate(self, prompt: str) -> Any:
        ...


class HttpGenerationClient:
    """POST {prompt} vers un endpoint de génération distant"""

    def __init__(self, url: str, timeout: int = settings.AI_REQUEST_TIMEOUT):
        self.url = url
        self.timeout = timeout

    def _post(self, prompt: str) -> Any:
        response = requests.post(self.url, json={"prompt": prompt}, timeout=self.timeout)

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = None
            error = body.get("error") if isinstance(body, dict) else None
            raise GenerationError(error or f"Generation endpoint returned {response.status_code}")

        return response.json()

    async def generate(self, prompt: str) -> Any:
        # requests est bloquant -> thread séparé pour garder la boucle libre
        return await asyncio.to_thread(self._post, prompt)


class LocalGenerationClient:
    """Appelle directement ai_service, sans passer par HTTP"""

    async def generate(self, prompt: str) -> Any:
        blocks, message = await asyncio.to_thread(ai_service.generate_blocks, prompt)
        return {"blocks": blocks, "message": message}


def default_client() -> GenerationClient:
    if settings.GENERATION_ENDPOINT_URL:
        return HttpGenerationClient(settings.GENERATION_ENDPOINT_URL)
    return LocalGenerationClient()
