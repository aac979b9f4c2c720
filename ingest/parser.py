"""
Parser righe listino (Stage 2) - Estrae nomi prodotto candidati dal testo.

Euristiche per listini tabellari "Sr. No | Item List": salta intestazioni
e piè di pagina, rimuove il numero d'ordine, tiene le colonne dopo la prima.
"""
import logging
import re
from typing import List

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 200

SKIP_PATTERNS = [
    re.compile(r'^sr\.?\s*no\.?', re.IGNORECASE),
    re.compile(r'^item\s*list', re.IGNORECASE),
    re.compile(r'^super\s*traders', re.IGNORECASE),
    re.compile(r'^page', re.IGNORECASE),
    re.compile(r'^table\s*of\s*contents', re.IGNORECASE),
    re.compile(r'^\d+\s*$'),
]

_ORDINAL_MARK_RE = re.compile(r'^\d+\s*[.|)]\s*')
_ORDINAL_SPACE_RE = re.compile(r'^\d+\s+')
_DIGITS_RE = re.compile(r'^\d+$')
_LINE_BREAK_RE = re.compile(r'\r?\n')


def should_skip(line: str) -> bool:
    """True se la riga è intestazione, piè di pagina o solo numero."""
    return any(pattern.search(line) for pattern in SKIP_PATTERNS)


def candidate_from_line(line: str) -> str:
    """
    Ricava il candidato da una singola riga già ripulita.

    "1. NOME", "1 | NOME", "1) NOME", "1 NOME" → "NOME".
    Se la riga contiene '|', la prima colonna è l'indice e si uniscono le altre.
    """
    candidate = _ORDINAL_MARK_RE.sub('', line, count=1)
    candidate = _ORDINAL_SPACE_RE.sub('', candidate, count=1).strip()

    if '|' in line:
        parts = [part.strip() for part in line.split('|')]
        if len(parts) >= 2:
            candidate = ' '.join(parts[1:]).strip()

    return candidate


def is_valid_candidate(candidate: str) -> bool:
    """Lunghezza 3-200 e non solo cifre."""
    return MIN_NAME_LENGTH <= len(candidate) <= MAX_NAME_LENGTH and not _DIGITS_RE.match(candidate)


def extract_product_names(text: str) -> List[str]:
    """
    Estrae nomi prodotto candidati, nell'ordine di lettura.

    I duplicati sono mantenuti: la deduplicazione è uno stage separato.

    Args:
        text: Testo completo estratto dal documento

    Returns:
        Lista candidati
    """
    if not text:
        return []

    lines = [line.strip() for line in _LINE_BREAK_RE.split(text)]
    lines = [line for line in lines if line]

    candidates: List[str] = []
    skipped = 0
    for line in lines:
        if should_skip(line):
            skipped += 1
            continue

        candidate = candidate_from_line(line)
        if is_valid_candidate(candidate):
            candidates.append(candidate)

    logger.info(
        f"[PARSER] {len(candidates)} candidati da {len(lines)} righe "
        f"({skipped} intestazioni/piè di pagina saltati)"
    )
    return candidates
