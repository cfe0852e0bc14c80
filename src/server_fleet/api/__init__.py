"""
server_fleet.api

API package for the server fleet service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring, error handlers and response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Routers validate, authorize and delegate; deletion logic lives in `services.server_deletion`.
