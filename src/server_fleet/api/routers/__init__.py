"""
server_fleet.api.routers

Router modules mounted by `server_fleet.api.app.create_app`.
"""

# Package marker.
