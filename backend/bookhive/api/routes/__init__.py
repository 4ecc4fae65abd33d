"""Route Modules — one file per concern.

Invariants:
    - Each module defines its own APIRouter
    - Route groups are registered in main.py in a fixed order, not_found last
"""
