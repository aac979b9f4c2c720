"""
Main FastAPI application per catalog-processor.

Adattatore HTTP sottile sopra la pipeline listino → catalogo.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from core.config import get_config, validate_config
from core.database import create_tables, get_session_factory
from core.logger import setup_colored_logging
from api.routers import catalog
from ingest.llm_client import close_completion_client

# Configurazione logging colorato
setup_colored_logging("processor")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: valida configurazione e crea tabelle. Shutdown: chiude il client LLM."""
    try:
        config = get_config()
        validate_config()

        await create_tables()

        if config.ai_available:
            logger.info(f"LLM configured ({config.llm_model}) - AI features enabled")
        else:
            logger.warning("LLM API key not found - AI features disabled")
    except Exception as e:
        logger.error(f"Error during startup: {e}", exc_info=True)
        raise

    yield

    await close_completion_client()


app = FastAPI(title="Catalog Processor", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog.router)  # /api/catalog/preview, /api/catalog/commit


@app.get("/health")
async def health_check():
    """Health check del servizio"""
    try:
        config = get_config()

        db_status = "unknown"
        try:
            async with get_session_factory()() as session:
                await session.execute(select(1))
                db_status = "connected"
        except Exception as db_error:
            db_status = f"error: {str(db_error)}"

        return {
            "status": "healthy",
            "service": "catalog-processor",
            "version": config.processor_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": db_status,
            "llm": "configured" if config.ai_available else "not_configured",
            "features": {
                "ai_classification_enabled": config.ai_classification_enabled,
                "ai_enrichment_enabled": config.ai_enrichment_enabled,
                "ocr_enabled": config.ocr_enabled,
                "enrich_concurrency": config.enrich_concurrency,
            },
            "endpoints": {
                "preview": "/api/catalog/preview",
                "commit": "/api/catalog/commit",
            }
        }

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {
            "status": "unhealthy",
            "service": "catalog-processor",
            "error": str(e),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_config().port)
