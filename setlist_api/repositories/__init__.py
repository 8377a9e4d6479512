"""
Persistence adapters.

Services depend on the DocumentStore interface and on typed Collection
wrappers; only the adapters know how documents are physically stored.
"""
