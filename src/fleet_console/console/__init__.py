"""
fleet_console.console

Role-gated session handling and record management for the admin console.

Responsibilities:
- Session store and the single admin predicate derived from it.
- Access gate for protected views.
- Settings controllers (admin management, self-service password) and record editors.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing in this package renders UI; view code reads controller state and calls
# controller operations.
