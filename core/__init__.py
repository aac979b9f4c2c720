"""
Core functionality per catalog-processor.

Questo modulo contiene:
- Configurazione (config.py)
- Database e store catalogo (database.py)
- Logging (logger.py)
"""
