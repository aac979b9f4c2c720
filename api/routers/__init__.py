"""
Routers per API catalog-processor.

Moduli:
- catalog: import listino PDF (POST /api/catalog/preview, POST /api/catalog/commit)
"""
from . import catalog

__all__ = ["catalog"]
