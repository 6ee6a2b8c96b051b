from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from pydantic import ValidationError

from ainotes.core.sessions import get_registry
from ainotes.models.block import Block, BlockType
from ainotes.schemas.block import BlockDraft, BlockUpdate
from ainotes.schemas.notes import (
    DispatchResponse, DragRequest, DragResponse, NotesState, PromptRequest,
    MarkdownPreviewRequest, ReorderRequest, SelectionRequest, SessionResponse,
)
from ainotes.services.block_defaults import BLOCK_TYPES, default_draft
from ainotes.services.markdown_service import export_markdown, render_markdown, text_stats
from ainotes.services.notes_store import InvalidIndexError
from ainotes.services.prompt_dispatcher import DispatchStatus
from ainotes.services.render_service import render_document
from ainotes.services.reorder_service import handle_drag_end
from ainotes.services.session_service import NoteSession, SessionRegistry

# Endpoints async : toutes les mutations passent par la boucle d'événements (pas de threads)
router = APIRouter(prefix="/notes", tags=["notes"])

async def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> NoteSession:
    """Récupère la session ou 404"""
    session = registry.get(session_id)
    if not session:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session

@router.get("/block-types")
async def list_block_types():
    """Types proposés par le sélecteur de block"""
    return BLOCK_TYPES

@router.post("/markdown/preview")
async def markdown_preview(data: MarkdownPreviewRequest):
    """Aperçu HTML d'un contenu markdown + stats (caractères, lignes)"""
    return {"html": render_markdown(data.content), **text_stats(data.content)}

# Sessions

@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(registry: SessionRegistry = Depends(get_registry)):
    session = registry.create()
    return SessionResponse(session_id=session.id)

@router.get("/sessions/{session_id}", response_model=NotesState)
async def get_state(session: NoteSession = Depends(get_session)):
    return session.store.snapshot()

@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    if not registry.close(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

# Blocks

@router.post("/sessions/{session_id}/blocks", response_model=Block, status_code=status.HTTP_201_CREATED)
async def add_block(block_data: BlockDraft, session: NoteSession = Depends(get_session)):
    """Ajouter un block à la fin du document"""
    try:
        return session.store.add_block(block_data)
    except ValidationError as e:
        # metadata invalide pour le type (ex: level=0)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors(include_url=False, include_context=False))

@router.post("/sessions/{session_id}/blocks/default/{block_type}", response_model=Block, status_code=status.HTTP_201_CREATED)
async def add_default_block(block_type: BlockType, session: NoteSession = Depends(get_session)):
    """Ajouter un block avec le contenu de départ du sélecteur"""
    return session.store.add_block(default_draft(block_type))

@router.patch("/sessions/{session_id}/blocks/{block_id}", response_model=Block)
async def update_block(block_id: str, block_data: BlockUpdate, session: NoteSession = Depends(get_session)):
    try:
        block = session.store.update_block(block_id, block_data)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors(include_url=False, include_context=False))
    if block is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Block not found")
    return block

@router.delete("/sessions/{session_id}/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_block(block_id: str, session: NoteSession = Depends(get_session)):
    if not session.store.delete_block(block_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Block not found")

@router.delete("/sessions/{session_id}/blocks", status_code=status.HTTP_204_NO_CONTENT)
async def clear_blocks(session: NoteSession = Depends(get_session)):
    session.store.clear_blocks()

# Ordre et sélection

@router.post("/sessions/{session_id}/reorder", response_model=NotesState)
async def reorder_blocks(data: ReorderRequest, session: NoteSession = Depends(get_session)):
    """Déplacer le block de from_index vers to_index"""
    try:
        session.store.reorder_blocks(data.from_index, data.to_index)
    except InvalidIndexError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return session.store.snapshot()

@router.post("/sessions/{session_id}/drag", response_model=DragResponse)
async def drag_end(data: DragRequest, session: NoteSession = Depends(get_session)):
    """Fin de drag : (block déplacé, block survolé). Ids introuvables -> moved=False"""
    moved = handle_drag_end(session.store, data.active_id, data.over_id)
    return DragResponse(moved=moved, state=NotesState(**session.store.snapshot()))

@router.put("/sessions/{session_id}/selection", response_model=NotesState)
async def select_block(data: SelectionRequest, session: NoteSession = Depends(get_session)):
    if data.toggle and data.block_id is not None:
        session.store.toggle_selection(data.block_id)
    else:
        session.store.select_block(data.block_id)
    return session.store.snapshot()

# Génération IA

@router.post("/sessions/{session_id}/prompt", response_model=DispatchResponse, status_code=status.HTTP_201_CREATED)
async def submit_prompt(data: PromptRequest, session: NoteSession = Depends(get_session)):
    result = await session.dispatcher.dispatch(data.prompt)

    if result.status is DispatchStatus.EMPTY_PROMPT:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Prompt is empty")
    if result.status in (DispatchStatus.BUSY, DispatchStatus.SUPERSEDED, DispatchStatus.CANCELLED):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Prompt {result.status.value}")
    if result.status is DispatchStatus.FAILED:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error or "Generation failed")

    return DispatchResponse(status=result.status.value, blocks=result.blocks)

@router.post("/sessions/{session_id}/prompt/cancel")
async def cancel_prompt(session: NoteSession = Depends(get_session)):
    return {"cancelled": session.dispatcher.cancel()}

# Sorties

@router.get("/sessions/{session_id}/render", response_class=HTMLResponse)
async def render(session: NoteSession = Depends(get_session)):
    store = session.store
    return render_document(store.blocks, store.selected_block_id)

@router.get("/sessions/{session_id}/export", response_class=PlainTextResponse)
async def export(session: NoteSession = Depends(get_session)):
    return PlainTextResponse(export_markdown(session.store.blocks), media_type="text/markdown")
