"""
fleet_console.api.routers

Router modules for the record-store service.
"""

# Package marker.
