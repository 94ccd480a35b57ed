"""
Configuration de l'application / Application configuration.
Utilise pydantic-settings pour charger depuis .env ou variables d'environnement.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "FleetDesk"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Database - SQLite par défaut pour le développement
    # Database - SQLite by default for development
    DATABASE_URL: str = "sqlite+aiosqlite:///./fleetdesk.db"

    # CORS - origines autorisées / allowed origins
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # JWT Authentication
    SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Rate Limiting
    RATE_LIMIT_LOGIN: str = "5/minute"

    # Declencheur planifie (cron) / Scheduled trigger shared secret, empty = disabled
    CRON_SECRET: str = ""

    # Limites par defaut des vehicules / Default vehicle limits
    DEFAULT_OIL_LIMIT_KM: int = 15000
    DEFAULT_ADBLUE_LIMIT_KM: int = 10000
    DEFAULT_BRAKES_LIMIT_KM: int = 60000
    DEFAULT_BEARINGS_LIMIT_KM: int = 100000
    DEFAULT_BRAKE_FLUID_LIMIT_MONTHS: int = 24
    DEFAULT_GREEN_CARD_LIMIT_MONTHS: int = 12
    DEFAULT_COOLANT_LIMIT_MONTHS: int = 24
    TECHNICAL_INSPECTION_VALIDITY_MONTHS: int = 24

    # Magasin pieces / Spare parts store
    DEFAULT_PART_UNIT: str = "pcs"

    # Premier dispatcher / First dispatcher account
    SEED_DISPATCHER_EMAIL: str = "dispatcher@fleetdesk.app"
    SEED_DISPATCHER_PASSWORD: str = "dispatcher"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
