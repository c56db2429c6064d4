"""Définition et chargement des paramètres de configuration de la console.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Détermination du fichier .env à utiliser avec priorité:
# 1) ENV_FILE (chemin explicite)
# 2) .env.{APP_ENV} si présent
# 3) .env (défaut)
_cwd = Path.cwd()
_env_file_from_env = os.getenv("ENV_FILE")
if _env_file_from_env:
    _ENV_FILE_PATH = _env_file_from_env
else:
    _app_env = os.getenv("APP_ENV", "dev")
    _candidate_specific = _cwd / f".env.{_app_env}"
    _candidate_default = _cwd / ".env"
    if _candidate_specific.exists():
        _ENV_FILE_PATH = _candidate_specific
    else:
        _ENV_FILE_PATH = _candidate_default


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "catalog-console"
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # Service catalogue distant
    CATALOG_API_URL: str = "http://localhost:8080/api"
    CATALOG_API_TOKEN: str | None = None

    # Troncature du contenu des artefacts
    DEFAULT_MAX_CONTENT_LENGTH: int = 4000
    FULL_CONTENT_MAX_LENGTH: int = 200_000
    CONTENT_LENGTH_PRESETS: list[int] = [4000, 10000, 50000]

    # Recherche
    SEARCH_MAX_TOP_K: int = 20
    DEFAULT_TOP_K: int = 5
    DEFAULT_MAX_SNIPPET_LENGTH: int = 240

    # Réindexation
    DEFAULT_REINDEX_LIMIT: int = 100

    # Serveur catalogue factice (dev local)
    FAKE_CATALOG_HOST: str = "127.0.0.1"
    FAKE_CATALOG_PORT: int = 8080


def get_settings() -> Settings:
    """Construit et retourne la configuration de la console."""
    return Settings()
