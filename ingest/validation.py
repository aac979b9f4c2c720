"""
Validation (Pydantic models) per categorie e prodotti prima della scrittura.

I vincoli replicano lo schema del catalogo: un errore qui diventa
un fallimento del singolo prodotto, non dell'intero batch.
"""
import logging
from typing import List, Dict, Any
from pydantic import BaseModel, Field, field_validator

from ingest.types import CategorySuggestion, ProductDraft

logger = logging.getLogger(__name__)


class CategoryModel(BaseModel):
    """Modello Pydantic v2 per categoria catalogo."""
    name: str = Field(..., min_length=1, max_length=50, description="Nome categoria (univoco)")
    icon: str = Field(default="🍫", max_length=10, description="Glifo categoria")
    description: str = Field(default="", max_length=200, description="Descrizione categoria")
    is_active: bool = Field(default=True)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Valida e normalizza nome categoria."""
        v = v.strip()
        if not v:
            raise ValueError("name deve essere non vuoto")
        return v


class ProductModel(BaseModel):
    """
    Modello Pydantic v2 per prodotto catalogo.

    Schema: name ≤100, description ≤500 obbligatoria, price ≥0, stock ≥0.
    """
    name: str = Field(..., min_length=1, max_length=100, description="Nome prodotto")
    description: str = Field(..., min_length=1, max_length=500, description="Descrizione prodotto")
    price: float = Field(..., ge=0.0, description="Prezzo (>= 0)")
    category: str = Field(..., min_length=1, description="Nome categoria")
    weight: str = Field(default="100g", description="Peso/formato")
    ingredients: List[str] = Field(default_factory=list)
    stock: int = Field(default=100, ge=0, description="Giacenza (>= 0)")
    in_stock: bool = Field(default=True)
    is_active: bool = Field(default=True)

    @field_validator('name', 'category')
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Rimuove spazi ai bordi."""
        return v.strip()

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Dalfi Dark Chocolate",
                "description": "Rich dark chocolate bar.",
                "price": 4.99,
                "category": "Chocolates",
                "weight": "100g",
                "ingredients": ["cocoa mass", "sugar", "cocoa butter"],
                "stock": 120
            }
        }
    }


def category_to_model(suggestion: CategorySuggestion) -> CategoryModel:
    """Valida una CategorySuggestion. Solleva ValidationError se non valida."""
    return CategoryModel(
        name=suggestion.name,
        icon=suggestion.icon,
        description=suggestion.description,
        is_active=suggestion.is_active,
    )


def draft_to_model(draft: ProductDraft) -> ProductModel:
    """Valida un ProductDraft. Solleva ValidationError se non valido."""
    model = ProductModel(
        name=draft.name,
        description=draft.description,
        price=draft.price,
        category=draft.category,
        weight=draft.weight,
        ingredients=draft.ingredients,
        stock=draft.stock,
        in_stock=draft.stock > 0,
        is_active=draft.is_active,
    )
    logger.debug(f"[VALIDATION] Prodotto valido: name={model.name}, category={model.category}")
    return model


def model_to_dict(model: BaseModel) -> Dict[str, Any]:
    """Converte un modello Pydantic in dict per lo store."""
    return model.model_dump(exclude_none=False)
