"""
Text Extract (Stage 1) - Estrazione testo da PDF.

Usa pdfplumber per il layer testuale; se il PDF non ha testo
(listino scansionato) applica OCR con pdf2image + pytesseract.
"""
import io
import logging
import time
from typing import Callable, Optional

import pdfplumber
import pytesseract
from pdf2image import convert_from_bytes

from ingest.errors import ExtractionError
from ingest.gate import check_document

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes], str]


def decode_pdf_text(pdf_content: bytes) -> str:
    """
    Estrae il layer testuale di un PDF preservando l'ordine di lettura.

    Args:
        pdf_content: Contenuto PDF (bytes)

    Returns:
        Testo concatenato di tutte le pagine
    """
    with pdfplumber.open(io.BytesIO(pdf_content)) as pdf:
        pages_text = [page.extract_text() or "" for page in pdf.pages]
    logger.debug(f"[TEXT_EXTRACT] pdfplumber: {len(pages_text)} pagine lette")
    return "\n".join(pages_text)


def ocr_pdf_text(pdf_content: bytes) -> str:
    """
    Estrae testo da PDF scansionato usando pdf2image + pytesseract.

    Args:
        pdf_content: Contenuto PDF (bytes)

    Returns:
        Testo estratto (concatenato da tutte le pagine)
    """
    images = convert_from_bytes(pdf_content)
    logger.info(f"[OCR] PDF converted to {len(images)} images")

    all_text = []
    for page_idx, image in enumerate(images):
        try:
            if image.mode != 'RGB':
                image = image.convert('RGB')
            page_text = pytesseract.image_to_string(image, lang='eng')
            all_text.append(page_text)
            logger.debug(f"[OCR] Page {page_idx + 1}/{len(images)}: {len(page_text)} characters")
        except Exception as e:
            logger.warning(f"[OCR] Error processing page {page_idx + 1}: {e}")
            continue

    return '\n'.join(all_text)


def extract_text(
    content: bytes,
    content_type: Optional[str],
    file_name: Optional[str] = None,
    decoder: Optional[Decoder] = None,
    ocr_fallback: bool = True,
) -> str:
    """
    Converte un documento in testo.

    Args:
        content: Contenuto documento (bytes)
        content_type: MIME type dichiarato
        file_name: Nome file (solo per logging)
        decoder: Decoder testo (default: pdfplumber)
        ocr_fallback: Se True, applica OCR quando il layer testuale è vuoto

    Returns:
        Testo estratto (può essere vuoto)

    Raises:
        InputError: Documento mancante o non PDF
        ExtractionError: Documento corrotto/illeggibile
    """
    check_document(content, content_type, file_name)
    decoder = decoder or decode_pdf_text
    start_time = time.time()

    try:
        text = decoder(content)
    except Exception as e:
        logger.error(f"[TEXT_EXTRACT] Errore decodifica {file_name}: {e}", exc_info=True)
        raise ExtractionError(f"Error parsing PDF: {e}") from e

    text = text or ""

    if not text.strip() and ocr_fallback:
        logger.info(f"[TEXT_EXTRACT] Nessun layer testuale in {file_name}, provo OCR")
        try:
            text = ocr_pdf_text(content)
        except Exception as e:
            # PDF valido ma OCR non disponibile: il run risulterà senza prodotti
            logger.warning(f"[OCR] OCR fallito per {file_name}: {e}")
            text = ""

    logger.info(
        f"[TEXT_EXTRACT] Estratti {len(text)} caratteri da {file_name or '<upload>'} "
        f"in {time.time() - start_time:.2f}s"
    )
    return text
