"""
Gate (Stage 0) - Controllo documento in ingresso.

Rifiuta documenti vuoti o di tipo non supportato prima di qualsiasi elaborazione.
"""
import logging
from typing import Optional

from ingest.errors import InputError

logger = logging.getLogger(__name__)

SUPPORTED_CONTENT_TYPES = ("application/pdf",)


def normalize_content_type(content_type: Optional[str]) -> str:
    """Normalizza content type: lowercase, senza parametri (es. '; charset=...')."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def check_document(content: Optional[bytes], content_type: Optional[str], file_name: Optional[str] = None) -> str:
    """
    Verifica che il documento sia presente e di tipo supportato.

    Args:
        content: Contenuto documento (bytes)
        content_type: MIME type dichiarato
        file_name: Nome file (solo per logging)

    Returns:
        Content type normalizzato

    Raises:
        InputError: Documento mancante/vuoto o formato non supportato
    """
    if not content:
        logger.error(f"[GATE] Documento mancante o vuoto: {file_name}")
        raise InputError("PDF file is required")

    normalized = normalize_content_type(content_type)
    if normalized not in SUPPORTED_CONTENT_TYPES:
        logger.error(f"[GATE] Formato non supportato per {file_name}: {content_type!r}")
        raise InputError("File must be a PDF")

    logger.info(f"[GATE] Documento {file_name or '<upload>'} accettato ({len(content)} bytes)")
    return normalized
