from fastapi import APIRouter, Depends

from ainotes.core.sessions import get_registry
from ainotes.services.session_service import SessionRegistry

router = APIRouter()

@router.get("/z")
def healthz(registry: SessionRegistry = Depends(get_registry)):
    # Check si l'API est up (+ nombre de sessions ouvertes)
    return {"status": "ok", "sessions": len(registry)}
