"""
Match prodotto → categoria tra quelle disponibili nel run.
"""
from typing import Sequence

from ingest.types import DEFAULT_CATEGORY

MIN_MATCH_WORD_LENGTH = 4


def match_category(product_name: str, categories: Sequence[str]) -> str:
    """
    Prima categoria (in ordine) con una parola di almeno 4 lettere contenuta nel nome prodotto.

    Senza match ritorna la prima categoria, o DEFAULT_CATEGORY se la lista è vuota.
    """
    product_lower = product_name.lower()

    for category in categories:
        for word in category.lower().split():
            if len(word) >= MIN_MATCH_WORD_LENGTH and word in product_lower:
                return category

    return categories[0] if categories else DEFAULT_CATEGORY
