"""
Infrastructure layer (no catalog semantics).

Technical building blocks behind the application ports: settings, blob
stores, the local movie/watchlist stores, and the admin CLI.
"""

__all__ = [
    "bootstrap",
    "config",
    "integrations",
    "persistence",
    "utils",
]
