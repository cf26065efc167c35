"""
Configuration de l'application / Application configuration.
Utilise pydantic-settings pour charger depuis .env ou variables d'environnement.
"""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Install Tracker"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Database - SQLite par défaut pour le développement
    # Database - SQLite by default for development
    DATABASE_URL: str = "sqlite+aiosqlite:///./install_tracker.db"

    # Cles du backend / Backend keys (seule leur presence est verifiee / presence-checked only)
    ANON_KEY: str = ""
    SERVICE_ROLE_KEY: str = ""

    # Jeton admin pour reset/seed / Admin token for reset/seed routes
    ADMIN_RESET_TOKEN: str = "admin123"

    # CORS - origines autorisées / allowed origins
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Rate Limiting
    RATE_LIMIT_ADMIN: str = "10/minute"
    RATE_LIMIT_DEFAULT: str = "60/minute"

    # Fichiers SQL servis en texte / SQL files served as plain text
    SQL_DIR: Path = Path(__file__).resolve().parent / "sql"

    # Paramètres projet par défaut / Default project parameters
    DEFAULT_PROJECT_DAYS: int = 14
    DEFAULT_TIME_SLOT: str = "8:30-11:30 AM"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
