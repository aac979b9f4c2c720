"""
Pipeline Orchestratore - Listino PDF → catalogo (categorie + prodotti).

Due modalità:
- preview: Gate → Testo → Parser → Dedup → Classificatore (nessuna scrittura)
- commit: come preview, poi Icone → Categorie → per prodotto { Match → Arricchimento → Scrittura }

Solo InputError ed ExtractionError interrompono il run; tutto il resto degrada
(fallback deterministici, skip, fallimenti per elemento) e finisce nel report.
"""
import asyncio
import logging
import time
from typing import List, Optional, Sequence, Tuple

from core.config import ProcessorConfig, get_config
from core.logger import log_json, set_request_context
from ingest.classifier import classify_categories
from ingest.dedup import dedupe_names
from ingest.enrich import enrich_product
from ingest.icons import category_description, resolve_icon
from ingest.llm_client import CompletionClient
from ingest.matcher import match_category
from ingest.parser import extract_product_names
from ingest.text_extract import Decoder, extract_text
from ingest.types import (
    DEFAULT_CATEGORY,
    NO_PRODUCTS_MESSAGE,
    CatalogReport,
    CategorySuggestion,
    PreviewResult,
    ProductDraft,
    WriteResult,
)
from ingest.writer import ALREADY_EXISTS_REASON, CatalogStore, CatalogWriter

logger = logging.getLogger(__name__)


def _classification_ai(ai: Optional[CompletionClient], config: ProcessorConfig) -> Optional[CompletionClient]:
    return ai if config.ai_classification_enabled else None


def _enrichment_ai(ai: Optional[CompletionClient], config: ProcessorConfig) -> Optional[CompletionClient]:
    return ai if config.ai_enrichment_enabled else None


def build_suggestions(category_names: Sequence[str]) -> List[CategorySuggestion]:
    """Nomi categoria → CategorySuggestion con icona e descrizione."""
    return [
        CategorySuggestion(
            name=name,
            icon=resolve_icon(name),
            description=category_description(name),
        )
        for name in category_names
    ]


async def _extract_candidates(
    content: bytes,
    content_type: Optional[str],
    file_name: Optional[str],
    decoder: Optional[Decoder],
    config: ProcessorConfig,
) -> List[str]:
    """Stage 0-2: gate, testo, parsing e deduplicazione."""
    text = extract_text(
        content,
        content_type,
        file_name=file_name,
        decoder=decoder,
        ocr_fallback=config.ocr_enabled,
    )
    candidates = extract_product_names(text)
    product_names = dedupe_names(candidates)
    logger.info(
        f"[PIPELINE] {len(product_names)} prodotti unici "
        f"({len(candidates) - len(product_names)} duplicati rimossi)"
    )
    return product_names


async def preview_document(
    content: bytes,
    content_type: Optional[str],
    file_name: Optional[str] = None,
    *,
    ai: Optional[CompletionClient] = None,
    config: Optional[ProcessorConfig] = None,
    decoder: Optional[Decoder] = None,
    correlation_id: Optional[str] = None,
) -> PreviewResult:
    """
    Anteprima: categorie proposte e prodotti trovati, senza scrivere nulla.

    Args:
        content: Contenuto documento (bytes)
        content_type: MIME type dichiarato
        file_name: Nome file (logging)
        ai: Client LLM (None = solo fallback)
        config: Configurazione (default get_config())
        decoder: Decoder testo PDF (default pdfplumber)
        correlation_id: ID correlazione (genera se None)

    Returns:
        PreviewResult

    Raises:
        InputError, ExtractionError
    """
    start_time = time.time()
    config = config or get_config()
    set_request_context(correlation_id=correlation_id, file_name=file_name)

    logger.info(f"[PIPELINE] Preview started: {file_name}")
    product_names = await _extract_candidates(content, content_type, file_name, decoder, config)

    if not product_names:
        log_json(level='info', message="Preview completed: no products", stage='preview',
                 elapsed_sec=time.time() - start_time, decision='empty', products_total=0)
        return PreviewResult(message=NO_PRODUCTS_MESSAGE)

    category_names, used_ai = await classify_categories(product_names, _classification_ai(ai, config))

    result = PreviewResult(
        categories=build_suggestions(category_names),
        products=product_names,
        used_ai=used_ai,
        message=(
            "Categories extracted successfully using AI" if used_ai
            else "Categories extracted successfully using keyword matching"
        ),
    )

    log_json(
        level='info',
        message="Preview completed",
        stage='preview',
        elapsed_sec=time.time() - start_time,
        decision='ok',
        products_total=result.product_count,
        categories_total=len(result.categories),
        used_ai=used_ai,
    )
    return result


async def _process_product(
    product_name: str,
    categories: Sequence[str],
    writer: CatalogWriter,
    ai: Optional[CompletionClient],
    config: ProcessorConfig,
) -> WriteResult:
    """Match → arricchimento → scrittura per un singolo prodotto (mai solleva)."""
    name = product_name.strip()
    try:
        if await writer.store.find_product(name) is not None:
            # Già a catalogo: nessuna chiamata IA
            return WriteResult(status="skipped", name=name, reason=ALREADY_EXISTS_REASON)

        category = match_category(product_name, categories)
        details = await enrich_product(
            product_name,
            category,
            ai=ai,
            max_description_length=config.max_description_length,
        )
        draft = ProductDraft.from_details(product_name, category, details)
    except Exception as e:
        logger.error(f"[PIPELINE] Errore preparazione prodotto {name}: {e}", exc_info=True)
        return WriteResult(status="failed", name=name, error=str(e) or type(e).__name__)

    return await writer.create_product(draft)


async def _process_products(
    product_names: Sequence[str],
    categories: Sequence[str],
    writer: CatalogWriter,
    ai: Optional[CompletionClient],
    config: ProcessorConfig,
) -> List[WriteResult]:
    """Sequenziale se enrich_concurrency == 1, altrimenti pool limitato; ordine risultati = ordine input."""
    if config.enrich_concurrency <= 1:
        results = []
        for idx, product_name in enumerate(product_names):
            logger.debug(f"[PIPELINE] Prodotto {idx + 1}/{len(product_names)}: {product_name}")
            results.append(await _process_product(product_name, categories, writer, ai, config))
        return results

    semaphore = asyncio.Semaphore(config.enrich_concurrency)

    async def _bounded(product_name: str) -> WriteResult:
        async with semaphore:
            return await _process_product(product_name, categories, writer, ai, config)

    return list(await asyncio.gather(*(_bounded(name) for name in product_names)))


async def _ensure_categories(
    writer: CatalogWriter,
    category_names: Sequence[str],
) -> Tuple[List[CategorySuggestion], List[str]]:
    """Crea le categorie; se nessuna è disponibile garantisce almeno la categoria di default."""
    batch = await writer.create_categories(build_suggestions(category_names))
    created, available = list(batch.created), list(batch.available)

    if not available:
        logger.warning(f"[PIPELINE] Nessuna categoria disponibile, uso '{DEFAULT_CATEGORY}'")
        fallback = await writer.create_categories(build_suggestions([DEFAULT_CATEGORY]))
        created.extend(fallback.created)
        available.extend(fallback.available)

    return created, available


async def commit_document(
    content: bytes,
    content_type: Optional[str],
    file_name: Optional[str] = None,
    *,
    store: CatalogStore,
    ai: Optional[CompletionClient] = None,
    config: Optional[ProcessorConfig] = None,
    decoder: Optional[Decoder] = None,
    correlation_id: Optional[str] = None,
) -> CatalogReport:
    """
    Commit: crea categorie e prodotti arricchiti, ritorna il CatalogReport.

    Flow:
    1. Gate → testo → parser → dedup (vuoto → report a zero, nessuna chiamata IA)
    2. Classificazione (IA o parole chiave)
    3. Creazione categorie (tutte prima dei prodotti)
    4. Per prodotto: match categoria → arricchimento → create-if-absent
    5. Report (creati, skip, falliti, used_ai)

    Raises:
        InputError, ExtractionError
    """
    start_time = time.time()
    config = config or get_config()
    set_request_context(correlation_id=correlation_id, file_name=file_name)

    logger.info(f"[PIPELINE] Commit started: {file_name}")
    product_names = await _extract_candidates(content, content_type, file_name, decoder, config)

    if not product_names:
        log_json(level='info', message="Commit completed: no products", stage='commit',
                 elapsed_sec=time.time() - start_time, decision='empty', products_total=0)
        return CatalogReport(message=NO_PRODUCTS_MESSAGE)

    category_names, used_ai = await classify_categories(product_names, _classification_ai(ai, config))

    writer = CatalogWriter(store)
    created_categories, available = await _ensure_categories(writer, category_names)

    report = CatalogReport(categories=created_categories, used_ai=used_ai)
    results = await _process_products(
        product_names, available, writer, _enrichment_ai(ai, config), config
    )
    for result in results:
        report.add_result(result)

    report.message = "Products created successfully"
    elapsed_sec = time.time() - start_time

    log_json(
        level='info',
        message="Commit completed",
        stage='commit',
        elapsed_sec=elapsed_sec,
        decision='ok',
        products_total=len(product_names),
        categories_created=report.categories_created,
        products_created=report.products_created,
        products_skipped=report.products_skipped,
        products_failed=report.products_failed,
        used_ai=used_ai,
    )
    logger.info(
        f"[PIPELINE] Commit completed: {file_name} | categories={report.categories_created}, "
        f"created={report.products_created}, skipped={report.products_skipped}, "
        f"failed={report.products_failed}, elapsed={elapsed_sec:.2f}s"
    )
    return report
