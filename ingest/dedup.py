"""
Deduplicazione nomi prodotto candidati (Stage 2b).

Chiave: nome senza spazi ai bordi, minuscolo. Vince la prima forma vista,
l'ordine di lettura è preservato.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)


def _name_key(value: str) -> str:
    return value.strip().lower()


def dedupe_names(names: Iterable[str]) -> List[str]:
    """
    Rimuove i duplicati case-insensitive.

    Args:
        names: Candidati nell'ordine del parser

    Returns:
        Lista nomi unici (forma originale della prima occorrenza)
    """
    seen: Dict[str, str] = {}

    for name in names:
        key = _name_key(name)
        if key not in seen:
            seen[key] = name

    deduped = list(seen.values())
    logger.debug(f"[DEDUP] {len(deduped)} nomi unici")
    return deduped
