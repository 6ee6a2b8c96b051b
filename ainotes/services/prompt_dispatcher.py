"""
Prompt dispatcher - transforme un prompt libre en nouveaux blocks.

1 Nettoyer le prompt (vide -> rien)
2 Une seule requête en cours : une nouvelle soumission remplace (annule) l'ancienne,
  ou est refusée si supersede=False
3 Appeler le client de génération
4 Valider TOUTE la réponse, puis ajouter les blocks dans l'ordre
   (tout ou rien, pas d'application partielle)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from ainotes.models.block import Block, build_block, utcnow
from ainotes.schemas.block import GenerationResponse
from ainotes.services.generation_client import GenerationClient
from ainotes.services.notes_store import NotesStore

logger = logging.getLogger(__name__)


class DispatchStatus(str, Enum):
    APPLIED = "applied"
    EMPTY_PROMPT = "empty_prompt"
    BUSY = "busy"
    SUPERSEDED = "superseded"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class DispatchResult:
    status: DispatchStatus
    blocks: list[Block] = field(default_factory=list)
    error: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is DispatchStatus.APPLIED


class PromptDispatcher:
    def __init__(self, store: NotesStore, client: GenerationClient, supersede: bool = True):
        self.store = store
        self.client = client
        self.supersede = supersede
        self._generation = 0
        self._task: Optional[asyncio.Future] = None
        # génération -> raison de l'abandon (SUPERSEDED / CANCELLED)
        self._aborted: dict[int, DispatchStatus] = {}

    @property
    def in_flight(self) -> bool:
        return self._task is not None

    async def dispatch(self, prompt: Optional[str]) -> DispatchResult:
        prompt = (prompt or "").strip()
        if not prompt:
            return DispatchResult(DispatchStatus.EMPTY_PROMPT)

        if self.in_flight:
            if not self.supersede:
                logger.info("Prompt refused: a request is already in flight")
                return DispatchResult(DispatchStatus.BUSY)
            self._abort(DispatchStatus.SUPERSEDED)

        self._generation += 1
        generation = self._generation
        task = asyncio.ensure_future(self.client.generate(prompt))
        self._task = task
        self.store.set_loading(True)

        try:
            payload = await task
        except asyncio.CancelledError:
            if generation not in self._aborted:
                # c'est l'appelant qui a été annulé
                self._finish(generation)
                raise
            return self._aborted_result(generation)
        except Exception as e:
            # échec arrivé après un cancel / remplacement : on garde la raison de l'abandon
            if generation in self._aborted:
                return self._aborted_result(generation)
            self._finish(generation)
            logger.error(f"Prompt dispatch failed: {e}")
            return DispatchResult(DispatchStatus.FAILED, error=str(e) or e.__class__.__name__)

        # réponse arrivée mais une requête plus récente a pris la main entre-temps
        if generation in self._aborted:
            return self._aborted_result(generation)

        self._finish(generation)
        return self._apply(payload)

    def cancel(self) -> bool:
        """Annule la requête en cours. False s'il n'y en a pas"""
        if not self.in_flight:
            return False
        self._abort(DispatchStatus.CANCELLED)
        self._task = None
        self.store.set_loading(False)
        return True

    def _abort(self, reason: DispatchStatus):
        self._aborted[self._generation] = reason
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def _aborted_result(self, generation: int) -> DispatchResult:
        reason = self._aborted.pop(generation)
        logger.info(f"Prompt request {generation} {reason.value}")
        return DispatchResult(reason)

    def _finish(self, generation: int):
        # seule la requête courante remet le flag de chargement à False
        if generation == self._generation and self._task is not None:
            self._task = None
            self.store.set_loading(False)

    def _apply(self, payload: Any) -> DispatchResult:
        try:
            response = GenerationResponse.model_validate(payload)
            now = utcnow()
            for draft in response.blocks:
                build_block(draft.model_dump(), "pending", now)
        except ValidationError as e:
            logger.error(f"Malformed generation response: {e.error_count()} error(s)")
            return DispatchResult(DispatchStatus.FAILED, error="Malformed generation response")

        added = [self.store.add_block(draft) for draft in response.blocks]
        return DispatchResult(DispatchStatus.APPLIED, blocks=added, message=response.message)
