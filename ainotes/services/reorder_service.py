# IMPORTS
import logging
from typing import Optional, Sequence, Tuple, TypeVar, TYPE_CHECKING

from ainotes.models.block import Block

if TYPE_CHECKING:
    from ainotes.services.notes_store import NotesStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


# func 1: array_move()
def array_move(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    # retire l'élément à from_index puis le réinsère à to_index (pas un swap)
    moved = list(items)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved


# func 2: resolve_drag()
def resolve_drag(blocks: Sequence[Block], active_id: str, over_id: Optional[str]) -> Optional[Tuple[int, int]]:
    """Traduit (block déplacé, block sous le pointeur) en (from_index, to_index)"""
    if over_id is None or active_id == over_id:
        return None

    from_index = next((i for i, b in enumerate(blocks) if b.id == active_id), -1)
    to_index = next((i for i, b in enumerate(blocks) if b.id == over_id), -1)

    if from_index == -1 or to_index == -1:
        return None
    return from_index, to_index


# func 3: handle_drag_end()
def handle_drag_end(store: "NotesStore", active_id: str, over_id: Optional[str]) -> bool:
    # un id introuvable (ex: block supprimé pendant le drag) -> on abandonne sans erreur
    indices = resolve_drag(store.blocks, active_id, over_id)
    if indices is None:
        logger.debug(f"Drag abandoned: active={active_id} over={over_id}")
        return False

    store.reorder_blocks(*indices)
    return True
