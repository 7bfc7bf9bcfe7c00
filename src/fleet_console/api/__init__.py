"""
fleet_console.api

Record-store HTTP service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and request/response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# This service stands in for the hosted table backend the console talks to; the
# console only depends on `fleet_console.records.client.RecordStore`.
