"""
Configurazione per catalog-processor usando pydantic-settings.

Gestisce variabili d'ambiente e feature flags per la pipeline listino → catalogo.
"""
import logging
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Carica .env
load_dotenv()

logger = logging.getLogger(__name__)


class ProcessorConfig(BaseSettings):
    """Configurazione completa del processor."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    database_url: str = Field(..., description="URL connessione database catalogo")

    # Server
    port: int = Field(default=8001, description="Porta server FastAPI")

    # LLM (API compatibile OpenAI). Nessuna chiave di default: senza chiave l'IA è disabilitata.
    llm_api_key: Optional[str] = Field(default=None, description="API key servizio LLM")
    llm_base_url: Optional[str] = Field(default=None, description="Base URL servizio LLM (None = OpenAI)")
    llm_model: str = Field(default="gpt-4o-mini", description="Modello LLM per classificazione e arricchimento")
    llm_timeout_sec: float = Field(default=120.0, gt=0, description="Timeout singola chiamata LLM (nessun retry)")

    # Feature flags
    ai_classification_enabled: bool = Field(default=True, description="Abilita classificazione categorie via IA")
    ai_enrichment_enabled: bool = Field(default=True, description="Abilita arricchimento prodotti via IA")
    ocr_enabled: bool = Field(default=True, description="Abilita OCR per PDF senza testo")

    # Arricchimento / scrittura
    enrich_concurrency: int = Field(default=1, ge=1, le=16, description="Prodotti arricchiti in parallelo (1 = sequenziale)")
    max_description_length: int = Field(default=500, ge=1, le=500, description="Lunghezza massima descrizione prodotto")

    # Processor info
    processor_name: str = Field(default="Catalog Processor", description="Nome processor")
    processor_version: str = Field(default="1.0.0", description="Versione processor")

    @property
    def ai_available(self) -> bool:
        """True se esiste una chiave LLM configurata."""
        return bool(self.llm_api_key and self.llm_api_key.strip())

    def validate_config(self) -> bool:
        """Valida configurazione critica."""
        errors = []

        if not self.database_url:
            errors.append("DATABASE_URL non configurato")

        if not self.ai_available:
            # Warning, non errore (classificazione/arricchimento useranno i fallback)
            logger.warning("LLM_API_KEY non configurato - AI features disabilitate, uso fallback deterministici")

        if errors:
            error_msg = "❌ Configurazione processor mancante:\n" + "\n".join(f"  - {error}" for error in errors)
            logger.error(error_msg)
            raise ValueError(error_msg)

        logger.info("✅ Configurazione processor validata con successo")
        return True


# Istanza globale configurazione
_config: ProcessorConfig | None = None


def get_config() -> ProcessorConfig:
    """Ottiene istanza configurazione (singleton)."""
    global _config
    if _config is None:
        _config = ProcessorConfig()
        _config.validate_config()
    return _config


def validate_config() -> bool:
    """Valida configurazione critica (funzione standalone)."""
    config = get_config()
    return config.validate_config()
