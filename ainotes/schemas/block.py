from pydantic import BaseModel
from typing import Optional, Any, List

from ainotes.models.block import BlockType

class BlockDraft(BaseModel):
    """Forme de création d'un block (sans id ni timestamps)"""
    type: BlockType
    content: str
    metadata: Optional[dict[str, Any]] = None

class BlockUpdate(BaseModel):
    """Modifier un block"""
    type: Optional[BlockType] = None
    content: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

class GenerationResponse(BaseModel):
    """Réponse de l'endpoint de génération"""
    blocks: List[BlockDraft]
    message: Optional[str] = None
