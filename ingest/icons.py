"""
Icone categoria: nome categoria → glifo.

Tabelle ordinate: categorie note prima, poi parole chiave.
"""
from typing import List, Tuple

DEFAULT_ICON = "📦"

PREDEFINED_ICONS: List[Tuple[str, str]] = [
    ("chocolate spreads", "🥜"),
    ("chocolates", "🍫"),
    ("jellies", "🍮"),
    ("puddings", "🍮"),
    ("malt drinks", "🥤"),
    ("coffee", "☕"),
    ("ice creams & candies", "🍦"),
    ("beverages", "🥤"),
]

KEYWORD_ICONS: List[Tuple[Tuple[str, ...], str]] = [
    (("chocolate",), "🍫"),
    (("coffee",), "☕"),
    (("jelly",), "🍮"),
    (("pudding",), "🍮"),
    (("malt", "drink", "beverage"), "🥤"),
    (("ice", "cream", "candy"), "🍦"),
    (("spread",), "🥜"),
]


def resolve_icon(category_name: str) -> str:
    """
    Glifo per una categoria.

    Prima le categorie note (match esatto o sottostringa in entrambe le direzioni),
    poi le parole chiave, infine DEFAULT_ICON.

    Args:
        category_name: Nome categoria

    Returns:
        Icona (emoji)
    """
    name = (category_name or "").strip().lower()
    if not name:
        return DEFAULT_ICON

    # Categorie note: match esatto o sottostringa in entrambe le direzioni
    for known, icon in PREDEFINED_ICONS:
        if name == known or known in name or name in known:
            return icon

    for keywords, icon in KEYWORD_ICONS:
        if any(keyword in name for keyword in keywords):
            return icon

    return DEFAULT_ICON


def category_description(category_name: str) -> str:
    """Descrizione standard: "Category for <nome minuscolo>"."""
    return f"Category for {category_name.lower()}"
