"""
Arricchimento prodotto (Stage 4) - Descrizione, prezzo, peso, ingredienti, giacenza.

Prompt P1 (un oggetto JSON per prodotto), una chiamata, nessun retry.
Ogni campo mancante o non valido prende il suo default; qualsiasi errore IA
produce il record completamente di default: l'arricchimento non blocca mai
la creazione del prodotto.
"""
import logging
import math
from typing import Any, Dict, List, Optional

from ingest.errors import AIUnavailable
from ingest.json_recovery import recover_object
from ingest.llm_client import CompletionClient
from ingest.types import ProductDetails

logger = logging.getLogger(__name__)

DEFAULT_PRICE = 9.99
DEFAULT_WEIGHT = "100g"
DEFAULT_STOCK = 100
MAX_DESCRIPTION_LENGTH = 500

ENRICH_SYSTEM_PROMPT = (
    "You are an expert product information researcher. Analyze product names and provide "
    "detailed product information in JSON format."
)


def default_description(product_name: str) -> str:
    return f"{product_name} - High quality product."


def build_enrichment_prompt(product_name: str, category_name: str) -> str:
    """Prompt P1: singolo oggetto JSON {description, price, weight, ingredients, stock}."""
    return f"""Research and provide detailed information for the following product:

Product Name: {product_name}
Category: {category_name}

Provide the following information in JSON format:
{{
  "description": "A brief, appealing product description (max 200 words)",
  "price": 0.00,
  "weight": "100g",
  "ingredients": ["ingredient1", "ingredient2"],
  "stock": 100
}}

Guidelines:
- Description should be marketing-friendly and highlight key features (max 200 words)
- Price should be a reasonable estimate in the product's typical price range (provide as number, e.g., 4.99)
- Weight should be in format like "100g", "250ml", "500g", etc.
- Ingredients should be an array of main ingredients (3-8 items)
- Stock should be a reasonable number (50-200)
- If you cannot determine specific details, provide reasonable estimates based on the product type

Return ONLY valid JSON, nothing else:"""


def _positive_number(value: Any) -> Optional[float]:
    """Numero finito > 0 (accetta stringhe numeriche), altrimenti None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip().lstrip("$€£").replace(",", "."))
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value) and value > 0:
        return float(value)
    return None


def _clean_ingredients(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    ingredients = []
    for item in value:
        if item is None:
            continue
        text = item.strip() if isinstance(item, str) else str(item).strip()
        if text:
            ingredients.append(text)
    return ingredients


def truncate_description(description: str, max_length: int = MAX_DESCRIPTION_LENGTH) -> str:
    return description[:max_length]


def details_from_data(
    product_name: str,
    data: Optional[Dict[str, Any]],
    max_description_length: int = MAX_DESCRIPTION_LENGTH,
) -> ProductDetails:
    """
    Costruisce ProductDetails applicando i default campo per campo.

    Args:
        product_name: Nome prodotto (per la descrizione di default)
        data: Oggetto recuperato dalla risposta IA (None = tutto di default)
        max_description_length: Troncamento descrizione
    """
    data = data or {}

    description = data.get("description")
    if not isinstance(description, str) or not description.strip():
        description = default_description(product_name)

    price = _positive_number(data.get("price"))
    if price is None:
        price = DEFAULT_PRICE

    weight = data.get("weight")
    if not isinstance(weight, str) or not weight.strip():
        weight = DEFAULT_WEIGHT

    stock = _positive_number(data.get("stock"))
    stock = int(stock) if stock is not None and stock >= 1 else DEFAULT_STOCK

    return ProductDetails(
        description=truncate_description(description.strip(), max_description_length),
        price=round(price, 2),
        weight=weight.strip(),
        ingredients=_clean_ingredients(data.get("ingredients")),
        stock=stock,
        used_ai=bool(data),
    )


async def enrich_with_ai(product_name: str, category_name: str, ai: CompletionClient) -> Dict[str, Any]:
    """
    Chiede all'LLM i dettagli prodotto.

    Raises:
        AIUnavailable: chiamata fallita o nessun oggetto JSON recuperabile
    """
    content = await ai.complete(ENRICH_SYSTEM_PROMPT, build_enrichment_prompt(product_name, category_name))
    data = recover_object(content)
    if data is None:
        logger.warning(f"[ENRICH] Risposta IA non interpretabile per {product_name}: {content[:200]!r}")
        raise AIUnavailable("Unparseable enrichment response")
    return data


async def enrich_product(
    product_name: str,
    category_name: str,
    ai: Optional[CompletionClient] = None,
    max_description_length: int = MAX_DESCRIPTION_LENGTH,
) -> ProductDetails:
    """
    Dettagli commerciali per un prodotto; non solleva mai per errori IA.

    Args:
        product_name: Nome prodotto
        category_name: Categoria assegnata (contesto per il prompt)
        ai: Client LLM (None = solo default)
        max_description_length: Troncamento descrizione

    Returns:
        ProductDetails (used_ai=False se record di default)
    """
    data: Optional[Dict[str, Any]] = None

    if ai is not None:
        try:
            data = await enrich_with_ai(product_name, category_name, ai)
        except AIUnavailable as e:
            logger.warning(f"[ENRICH] IA non disponibile per {product_name} ({e}), uso default")
        except Exception as e:
            logger.warning(
                f"[ENRICH] Errore imprevisto IA per {product_name} ({type(e).__name__}: {e}), uso default",
                exc_info=True
            )

    details = details_from_data(product_name, data, max_description_length)
    logger.debug(
        f"[ENRICH] {product_name}: price={details.price}, weight={details.weight}, "
        f"stock={details.stock}, used_ai={details.used_ai}"
    )
    return details
