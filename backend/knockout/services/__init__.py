"""
Services Layer

Finals business logic that:
- Accepts domain inputs (IDs, sessions, team snapshots)
- Returns domain outputs (models, dataclasses)
- Does NOT depend on HTTP request/response objects
- Raises module-specific errors that routers translate to HTTP responses
"""
