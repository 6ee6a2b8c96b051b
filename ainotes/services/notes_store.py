"""
Store des notes - état en mémoire d'une session.

Contient la liste ordonnée des blocks, le block sélectionné et le flag de chargement.
Chaque mutation notifie les listeners abonnés, de façon synchrone, après le changement.
"""

import logging
from datetime import timedelta
from typing import Any, Callable, Optional, Union

from ainotes.models.block import Block, block_adapter, build_block, new_block_id, utcnow
from ainotes.schemas.block import BlockDraft, BlockUpdate
from ainotes.services.reorder_service import array_move

logger = logging.getLogger(__name__)

Listener = Callable[[str, "NotesStore"], None]

# champs qu'une mise à jour n'a pas le droit de toucher
_PROTECTED_FIELDS = ("id", "created_at", "updated_at")


class InvalidIndexError(IndexError):
    def __init__(self, index: int, length: int):
        super().__init__(f"Index {index} out of range for {length} blocks")
        self.index = index
        self.length = length


class NotesStore:
    def __init__(self):
        self._blocks: list[Block] = []
        self._selected_block_id: Optional[str] = None
        self._is_loading = False
        self._listeners: list[Listener] = []

    # Lecture

    @property
    def blocks(self) -> tuple[Block, ...]:
        return tuple(self._blocks)

    @property
    def selected_block_id(self) -> Optional[str]:
        return self._selected_block_id

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def __len__(self) -> int:
        return len(self._blocks)

    def index_of(self, block_id: str) -> int:
        for i, block in enumerate(self._blocks):
            if block.id == block_id:
                return i
        return -1

    def get_block(self, block_id: str) -> Optional[Block]:
        i = self.index_of(block_id)
        return self._blocks[i] if i != -1 else None

    def snapshot(self) -> dict[str, Any]:
        return {
            "blocks": list(self._blocks),
            "selected_block_id": self._selected_block_id,
            "is_loading": self._is_loading,
        }

    # Abonnements

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Abonne un listener, retourne la fonction de désabonnement"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, action: str):
        for listener in list(self._listeners):
            listener(action, self)

    # Mutations

    def add_block(self, draft: Union[BlockDraft, dict[str, Any]]) -> Block:
        data = draft.model_dump() if isinstance(draft, BlockDraft) else dict(draft)
        for field in _PROTECTED_FIELDS:
            data.pop(field, None)

        block_id = new_block_id()
        while self.index_of(block_id) != -1:
            block_id = new_block_id()

        block = build_block(data, block_id, utcnow())
        self._blocks.append(block)
        self._notify("addBlock")
        return block

    def update_block(self, block_id: str, changes: Union[BlockUpdate, dict[str, Any]]) -> Optional[Block]:
        i = self.index_of(block_id)
        if i == -1:
            logger.debug(f"update_block: no block with id {block_id}")
            return None

        if isinstance(changes, BlockUpdate):
            changes = changes.model_dump(exclude_none=True)
        changes = {k: v for k, v in changes.items() if k not in _PROTECTED_FIELDS}

        current = self._blocks[i]
        data = current.model_dump()
        data.update(changes)
        # updated_at strictement croissant même si l'horloge n'a pas bougé
        now = utcnow()
        if now <= current.updated_at:
            now = current.updated_at + timedelta(microseconds=1)
        data["updated_at"] = now

        updated = block_adapter.validate_python(data)
        self._blocks[i] = updated
        self._notify("updateBlock")
        return updated

    def delete_block(self, block_id: str) -> bool:
        i = self.index_of(block_id)
        if i == -1:
            logger.debug(f"delete_block: no block with id {block_id}")
            return False

        del self._blocks[i]
        if self._selected_block_id == block_id:
            self._selected_block_id = None
        self._notify("deleteBlock")
        return True

    def reorder_blocks(self, from_index: int, to_index: int):
        length = len(self._blocks)
        for index in (from_index, to_index):
            if not 0 <= index < length:
                raise InvalidIndexError(index, length)

        self._blocks = array_move(self._blocks, from_index, to_index)
        self._notify("reorderBlocks")

    def select_block(self, block_id: Optional[str]):
        # pas de vérification d'existence
        self._selected_block_id = block_id
        self._notify("selectBlock")

    def toggle_selection(self, block_id: str):
        self.select_block(None if self._selected_block_id == block_id else block_id)

    def set_loading(self, loading: bool):
        self._is_loading = loading
        self._notify("setLoading")

    def clear_blocks(self):
        self._blocks = []
        self._selected_block_id = None
        self._notify("clearBlocks")
