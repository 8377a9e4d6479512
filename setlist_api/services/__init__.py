"""
High-level use cases for the Setlist Manager API.

Each service module orchestrates typed collections over one injected
DocumentStore to implement business rules (register, verify, befriend,
share a song, reorder a setlist, ...).

Routers (FastAPI endpoints) call these services instead of touching the
store directly.
"""
