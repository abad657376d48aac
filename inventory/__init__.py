"""inventory/ -- Car records: filters, pagination, validation, persistence, and the CRUD contract.

Layer rule: inventory/ imports from core/ and auth/ (for the role gate) only.
It does NOT import from api/. FastAPI types never appear here.
"""
