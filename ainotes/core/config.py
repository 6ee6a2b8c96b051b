from os import getenv

class Settings:
    GEMINI_API_KEY = getenv("GEMINI_API_KEY", "")  # vide = réponses de démo
    GEMINI_MODEL = getenv("GEMINI_MODEL", "gemini-1.5-flash")
    GEMINI_BASE_URL = getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    GENERATION_ENDPOINT_URL = getenv("GENERATION_ENDPOINT_URL", "")  # vide = appel direct au service IA
    AI_REQUEST_TIMEOUT = int(getenv("AI_REQUEST_TIMEOUT", "60"))  # en secondes
    PROMPT_SUPERSEDE = getenv("PROMPT_SUPERSEDE", "true").lower() in ("1", "true", "yes")
    CORS_ORIGINS = [o.strip() for o in getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    LOG_LEVEL = getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()
