"""
Router per import catalogo da listino PDF.

Endpoint:
- POST /api/catalog/preview: categorie proposte e prodotti trovati (nessuna scrittura)
- POST /api/catalog/commit: crea categorie e prodotti, ritorna il report
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from core.database import SqlCatalogStore
from ingest.errors import ExtractionError, InputError
from ingest.llm_client import CompletionClient, get_completion_client
from ingest.pipeline import commit_document, preview_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


def get_store() -> SqlCatalogStore:
    return SqlCatalogStore()


def get_ai_client() -> Optional[CompletionClient]:
    return get_completion_client()


def _to_http_error(error: Exception) -> HTTPException:
    if isinstance(error, InputError):
        return HTTPException(status_code=400, detail=str(error))
    return HTTPException(status_code=422, detail=str(error))


@router.post("/preview")
async def preview_catalog(
    file: Optional[UploadFile] = File(None),
    correlation_id: Optional[str] = Form(None),
    ai: Optional[CompletionClient] = Depends(get_ai_client),
):
    """Anteprima import: nessuna scrittura sul catalogo."""
    content = await file.read() if file is not None else b""
    content_type = file.content_type if file is not None else None
    file_name = file.filename if file is not None else None

    try:
        result = await preview_document(
            content,
            content_type,
            file_name,
            ai=ai,
            correlation_id=correlation_id,
        )
    except (InputError, ExtractionError) as e:
        logger.warning(f"[API] Preview rifiutata per {file_name}: {e}")
        raise _to_http_error(e) from e

    return result.to_dict()


@router.post("/commit")
async def commit_catalog(
    file: Optional[UploadFile] = File(None),
    correlation_id: Optional[str] = Form(None),
    ai: Optional[CompletionClient] = Depends(get_ai_client),
    store: SqlCatalogStore = Depends(get_store),
):
    """Import completo: crea categorie e prodotti (idempotente per nome)."""
    content = await file.read() if file is not None else b""
    content_type = file.content_type if file is not None else None
    file_name = file.filename if file is not None else None

    try:
        report = await commit_document(
            content,
            content_type,
            file_name,
            store=store,
            ai=ai,
            correlation_id=correlation_id,
        )
    except (InputError, ExtractionError) as e:
        logger.warning(f"[API] Commit rifiutato per {file_name}: {e}")
        raise _to_http_error(e) from e

    return report.to_dict()
