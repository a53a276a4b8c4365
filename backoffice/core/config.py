"""
Back-office - Configuration
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
import secrets
from pathlib import Path
from dotenv import load_dotenv

# Carrega .env da raiz do projeto (sobrescreve variaveis do sistema)
env_file = Path(__file__).parent.parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file, override=True)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Back-office Contratos"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./backoffice.db"

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    PASSWORD_RESET_EXPIRE_MINUTES: int = 30
    PASSWORD_MIN_LENGTH: int = 6
    LOGIN_RATE_LIMIT: str = "10/minute"

    # CORS
    CORS_ORIGINS: list = ["*"]

    # Email Settings (SMTP)
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM_EMAIL: str = "noreply@backoffice.local"
    SMTP_FROM_NAME: str = "Back-office Contratos"
    SMTP_TLS: bool = True
    SMTP_SSL: bool = False

    # App URLs
    APP_URL: str = "http://localhost:5173"

    # Consulta de CEP (ViaCEP)
    CEP_LOOKUP_URL: str = "https://viacep.com.br/ws"
    CEP_LOOKUP_TIMEOUT: float = 10.0

    # Storage de arquivos
    UPLOADS_DIR: str = "uploads"
    MAX_FILE_SIZE_MB: int = 50
    ALLOWED_EXTENSIONS: list = ["pdf", "doc", "docx", "jpg", "jpeg", "png", "xlsx"]

    # Padroes de contrato
    DEFAULT_PROCESS_STATUS: str = "pendente"
    DEFAULT_PROCESS_PRIORITY: str = "media"

    class Config:
        extra = "ignore"
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
