# teamboard/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Teamboard API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    ]

    # Project cache
    # Bulk-load every project into the entity cache at startup (sessions reload it again on sign-in)
    preload_project_cache: bool = os.getenv("PRELOAD_PROJECT_CACHE", "true").lower() in ("true", "1", "yes")
    # Status written when a new project does not carry one
    project_default_status: str = os.getenv("PROJECT_DEFAULT_STATUS", "planning")

    # Teams
    team_default_max_members: int = int(os.getenv("TEAM_DEFAULT_MAX_MEMBERS", "10"))

    # Sessions
    # Seconds without a request before a signed-in session is closed (0 disables)
    session_idle_timeout: int = int(os.getenv("SESSION_IDLE_TIMEOUT", "1800"))

settings = Settings()  # Instantiate configuration
