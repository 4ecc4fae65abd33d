"""API Layer — FastAPI routes, admission gate and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All API errors return structured JSON responses
"""
