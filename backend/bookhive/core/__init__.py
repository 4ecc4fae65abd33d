"""Core Layer — pure decision logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from api/, infrastructure/, or server
    - All functions are pure and deterministic

Design Decisions:
    - Origin policy and lifecycle transitions live here so they can be tested
      without a running server or datastore
"""
