"""
server_fleet

Top-level package for the server fleet control service.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Nothing here may import submodules; the API, services and migrations import what they need.
