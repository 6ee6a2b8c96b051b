"""Sessions de notes : un store + un dispatcher par session, en mémoire"""

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from ainotes.core.config import settings
from ainotes.services.generation_client import GenerationClient, default_client
from ainotes.services.notes_store import NotesStore
from ainotes.services.prompt_dispatcher import PromptDispatcher

logger = logging.getLogger(__name__)


@dataclass
class NoteSession:
    id: str
    store: NotesStore
    dispatcher: PromptDispatcher


class SessionRegistry:
    def __init__(self, client_factory: Callable[[], GenerationClient] = default_client,
                 supersede: bool = settings.PROMPT_SUPERSEDE):
        self._sessions: dict[str, NoteSession] = {}
        self._client_factory = client_factory
        self._supersede = supersede

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> NoteSession:
        store = NotesStore()
        dispatcher = PromptDispatcher(store, self._client_factory(), supersede=self._supersede)
        session = NoteSession(id=uuid.uuid4().hex, store=store, dispatcher=dispatcher)
        self._sessions[session.id] = session
        logger.info(f"Session {session.id} created")
        return session

    def get(self, session_id: str) -> Optional[NoteSession]:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.dispatcher.cancel()
        logger.info(f"Session {session_id} closed")
        return True
