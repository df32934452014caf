"""
Route modules for the API.

Each module exports a FastAPI APIRouter with endpoints
for a specific domain/feature.
"""

from api.routes import clothing, health, outfits, recommend, search, upload

__all__ = ["clothing", "health", "outfits", "recommend", "search", "upload"]
