"""
Eccezioni della pipeline listino → catalogo.

Solo InputError ed ExtractionError interrompono un'elaborazione;
AIUnavailable resta interna a classificatore e arricchimento.
"""


class CatalogPipelineError(Exception):
    """Base per errori della pipeline."""


class InputError(CatalogPipelineError, ValueError):
    """Documento mancante o formato non supportato."""


class ExtractionError(CatalogPipelineError):
    """Documento corrotto o illeggibile dal decoder."""


class AIUnavailable(CatalogPipelineError):
    """Chiamata LLM fallita, scaduta o con risposta inutilizzabile."""
