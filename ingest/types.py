"""
Tipi condivisi della pipeline catalogo.

Dataclass per suggerimenti categoria, dettagli e bozze prodotto, esiti di
scrittura e risultati preview/commit (serializzati con chiavi camelCase).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

WriteStatus = Literal["created", "skipped", "failed"]

DEFAULT_CATEGORY = "Products"
NO_PRODUCTS_MESSAGE = "No products found in PDF"


@dataclass
class CategorySuggestion:
    """Categoria proposta (nome, icona, descrizione) prima della scrittura."""
    name: str
    icon: str
    description: str
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "isActive": self.is_active,
        }


@dataclass
class ProductDetails:
    """Dettagli commerciali da arricchimento (used_ai=False se tutti di default)."""
    description: str
    price: float
    weight: str
    ingredients: List[str]
    stock: int
    used_ai: bool = False


@dataclass
class ProductDraft:
    """Prodotto pronto per validazione e scrittura."""
    name: str
    description: str
    price: float
    category: str
    weight: str
    ingredients: List[str] = field(default_factory=list)
    stock: int = 100
    is_active: bool = True

    @classmethod
    def from_details(cls, name: str, category: str, details: ProductDetails) -> "ProductDraft":
        return cls(
            name=name.strip(),
            description=details.description,
            price=details.price,
            category=category,
            weight=details.weight,
            ingredients=list(details.ingredients),
            stock=details.stock,
        )


@dataclass
class WriteResult:
    """Esito scrittura di un singolo prodotto: created, skipped (reason) o failed (error)."""
    status: WriteStatus
    name: str
    record: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None
    error: Optional[str] = None


@dataclass
class CategoryBatchResult:
    created: List[CategorySuggestion] = field(default_factory=list)
    available: List[str] = field(default_factory=list)


@dataclass
class PreviewResult:
    """Risultato anteprima: categorie proposte e prodotti trovati, nessuna scrittura."""
    categories: List[CategorySuggestion] = field(default_factory=list)
    products: List[str] = field(default_factory=list)
    used_ai: bool = False
    message: str = ""

    @property
    def product_count(self) -> int:
        return len(self.products)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": [c.to_dict() for c in self.categories],
            "products": list(self.products),
            "productCount": self.product_count,
            "usedAI": self.used_ai,
            "message": self.message,
        }


@dataclass
class CatalogReport:
    """
    Report del commit: categorie create, prodotti creati/saltati/falliti.

    Ritornato al chiamante, mai persistito.
    """
    categories: List[CategorySuggestion] = field(default_factory=list)
    products: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[Dict[str, str]] = field(default_factory=list)
    failed: List[Dict[str, str]] = field(default_factory=list)
    used_ai: bool = False
    message: str = ""

    @property
    def categories_created(self) -> int:
        return len(self.categories)

    @property
    def products_created(self) -> int:
        return len(self.products)

    @property
    def products_skipped(self) -> int:
        return len(self.skipped)

    @property
    def products_failed(self) -> int:
        return len(self.failed)

    def add_result(self, result: WriteResult) -> None:
        if result.status == "created":
            self.products.append(result.record or {"name": result.name})
        elif result.status == "skipped":
            self.skipped.append({"name": result.name, "reason": result.reason or ""})
        else:
            self.failed.append({"name": result.name, "error": result.error or "Unknown error"})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categoriesCreated": self.categories_created,
            "categories": [{"name": c.name, "icon": c.icon} for c in self.categories],
            "productsCreated": self.products_created,
            "productsSkipped": self.products_skipped,
            "productsFailed": self.products_failed,
            "products": list(self.products),
            "skipped": list(self.skipped),
            "failed": list(self.failed),
            "usedAI": self.used_ai,
            "message": self.message,
        }
