"""
Classificatore categorie (Stage 3) - Deriva i nomi categoria dai prodotti.

Prima prova l'IA (Prompt C1, una chiamata, nessun retry); se non disponibile
o la risposta è inutilizzabile, usa il classificatore deterministico a parole chiave.
"""
import logging
import time
from typing import Dict, List, Optional, Sequence, Tuple

from ingest.errors import AIUnavailable
from ingest.json_recovery import recover_name_list
from ingest.llm_client import CompletionClient
from ingest.types import DEFAULT_CATEGORY

logger = logging.getLogger(__name__)

MAX_CATEGORY_NAME_LENGTH = 50
CATCH_ALL_CATEGORY = "Other Products"

# Ordine significativo: le categorie più specifiche prima
CATEGORY_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("Chocolate Spreads", ("spread", "nutella", "lotus")),
    ("Chocolates", ("chocolate", "choco", "dalfi", "coin", "twistar", "hazelnut")),
    ("Jellies", ("jelly", "jellies", "cocon")),
    ("Puddings", ("pudding", "puddings")),
    ("Malt Drinks", ("malt", "bavaria")),
    ("Coffee", ("coffee", "davidoff", "cafe", "crema", "brazil")),
    ("Ice Creams & Candies", ("ice", "candy", "yogo", "candies")),
    ("Beverages", ("drink", "bottle", "ml")),
]

STOP_WORDS = frozenset({"with", "and", "the", "for", "from", "original", "bottle", "ml", "gms", "gms."})

CLASSIFY_SYSTEM_PROMPT = (
    "You are an expert e-commerce category analyst. Analyze product names and suggest "
    "appropriate category names for organizing products in an online store."
)


def build_classification_prompt(product_names: Sequence[str]) -> str:
    """Prompt C1: lista numerata prodotti → array JSON di 5-10 categorie."""
    numbered = "\n".join(f"{idx + 1}. {name}" for idx, name in enumerate(product_names))
    return f"""Analyze the following list of product names and suggest appropriate category names for an e-commerce store.

Product names:
{numbered}

Instructions:
1. Analyze the product names and identify common product types, brands, or characteristics
2. Group similar products together
3. Suggest 5-10 category names that would logically organize these products
4. Each category should be a single, clear name (e.g., "Chocolates", "Beverages", "Coffee", "Jellies")
5. Categories should be broad enough to group multiple products but specific enough to be meaningful
6. Return ONLY a JSON array of category names, nothing else
7. Format: ["Category 1", "Category 2", "Category 3"]

Example response format:
["Chocolates", "Chocolate Spreads", "Jellies", "Puddings", "Malt Drinks", "Coffee", "Ice Creams & Candies"]

Return the categories as a JSON array:"""


def _normalize_category_names(names: Sequence[str]) -> List[str]:
    """Trim, rimuove vuoti, duplicati esatti e nomi oltre 50 caratteri."""
    result: List[str] = []
    for name in names:
        name = name.strip()
        if not name or name in result:
            continue
        if len(name) > MAX_CATEGORY_NAME_LENGTH:
            logger.debug(f"[CLASSIFIER] Categoria IA scartata (troppo lunga): {name[:60]}")
            continue
        result.append(name)
    return result


async def classify_with_ai(product_names: Sequence[str], ai: CompletionClient) -> List[str]:
    """
    Classifica i prodotti con l'LLM.

    Raises:
        AIUnavailable: chiamata fallita o nessuna categoria recuperabile
    """
    start_time = time.time()
    content = await ai.complete(CLASSIFY_SYSTEM_PROMPT, build_classification_prompt(product_names))

    categories = _normalize_category_names(recover_name_list(content))
    if not categories:
        logger.warning(f"[CLASSIFIER] Risposta IA non interpretabile: {content[:200]!r}")
        raise AIUnavailable("Unparseable classification response")

    logger.info(
        f"[CLASSIFIER] IA: {len(categories)} categorie per {len(product_names)} prodotti "
        f"in {time.time() - start_time:.2f}s"
    )
    return categories


def _first_significant_word(product_name: str) -> Optional[str]:
    for word in product_name.split():
        lowered = word.lower()
        if len(word) > 3 and not word[0].isdigit() and lowered not in STOP_WORDS:
            return lowered
    return None


def classify_by_keywords(product_names: Sequence[str]) -> List[str]:
    """
    Classificatore deterministico a parole chiave (fallback).

    Ogni prodotto è assegnato alla prima categoria della tabella con una parola chiave
    contenuta nel nome; i non assegnati sono raggruppati per prima parola significativa.

    Returns:
        Nomi categoria in ordine alfabetico
    """
    claimed: Dict[str, List[str]] = {}
    unclaimed: List[str] = []

    for product in product_names:
        product_lower = product.lower()
        for category, keywords in CATEGORY_KEYWORDS:
            if any(keyword in product_lower for keyword in keywords):
                claimed.setdefault(category, []).append(product)
                break
        else:
            unclaimed.append(product)

    categories = list(claimed)

    if unclaimed:
        word_groups: Dict[str, List[str]] = {}
        for product in unclaimed:
            word = _first_significant_word(product)
            if word:
                word_groups.setdefault(word, []).append(product)

        ad_hoc_formed = False
        for word, products in word_groups.items():
            if len(products) >= 2:
                ad_hoc_formed = True
                category = word[0].upper() + word[1:]
                if category not in categories:
                    categories.append(category)

        if not ad_hoc_formed and len(unclaimed) > 3:
            categories.append(CATCH_ALL_CATEGORY)

    if not categories and product_names:
        categories.append(DEFAULT_CATEGORY)

    logger.info(
        f"[CLASSIFIER] Fallback parole chiave: {len(categories)} categorie, "
        f"{len(unclaimed)} prodotti senza parola chiave"
    )
    return sorted(categories)


async def classify_categories(
    product_names: Sequence[str],
    ai: Optional[CompletionClient] = None,
) -> Tuple[List[str], bool]:
    """
    Deriva le categorie: IA se disponibile, altrimenti parole chiave.

    Args:
        product_names: Nomi prodotto deduplicati
        ai: Client LLM (None = IA non disponibile/disabilitata)

    Returns:
        Tuple (categorie, used_ai)
    """
    if not product_names:
        return [], False

    if ai is not None:
        try:
            return await classify_with_ai(product_names, ai), True
        except AIUnavailable as e:
            logger.warning(f"[CLASSIFIER] IA non disponibile ({e}), uso fallback parole chiave")
        except Exception as e:
            logger.warning(
                f"[CLASSIFIER] Errore imprevisto IA ({type(e).__name__}: {e}), uso fallback parole chiave",
                exc_info=True
            )

    return classify_by_keywords(product_names), False
