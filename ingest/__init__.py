"""
Ingest pipeline per import listino PDF → catalogo prodotti.

Questo modulo contiene la pipeline per l'elaborazione dei listini:
- Stage 0: Gate (documento presente e di tipo PDF)
- Stage 1: Estrazione testo (pdfplumber, fallback OCR)
- Stage 2: Parsing righe → nomi prodotto candidati + deduplicazione
- Stage 3: Classificazione categorie (IA, fallback parole chiave)
- Stage 4: Arricchimento prodotti (IA, fallback default)
- Stage 5: Scrittura idempotente di categorie e prodotti
"""
