from fastapi import Request

from ainotes.services.session_service import SessionRegistry

def get_registry(request: Request) -> SessionRegistry:
    """Dépendance registre des sessions (porté par app.state)"""
    return request.app.state.sessions
