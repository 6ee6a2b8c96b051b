from pydantic import BaseModel
from typing import Optional, List

from ainotes.models.block import Block

# Schemas pour les sessions de notes

class SessionResponse(BaseModel):
    session_id: str

class NotesState(BaseModel):
    blocks: List[Block]
    selected_block_id: Optional[str]
    is_loading: bool

class ReorderRequest(BaseModel):
    from_index: int
    to_index: int

class DragRequest(BaseModel):
    active_id: str
    over_id: Optional[str] = None

class DragResponse(BaseModel):
    moved: bool
    state: NotesState

class SelectionRequest(BaseModel):
    block_id: Optional[str] = None
    toggle: bool = False

class PromptRequest(BaseModel):
    prompt: str

class DispatchResponse(BaseModel):
    status: str
    blocks: List[Block] = []

class MarkdownPreviewRequest(BaseModel):
    content: str
