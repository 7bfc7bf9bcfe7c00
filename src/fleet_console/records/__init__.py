"""
fleet_console.records

Remote record-store boundary used by the console.

Responsibilities:
- Define the collaborator contract (`RecordStore`) and its error types.
- Provide the HTTP implementation that talks to the record-store service.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Console code depends on `records.client` only; `records.http` is wired at the edge.
