"""Infrastructure Layer — datastore client and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from api/
    - Driver exceptions are mapped to core/errors.py before leaving this layer
"""
