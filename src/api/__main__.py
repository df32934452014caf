"""Run the API with uvicorn: python -m api"""

import uvicorn

from config.settings import get_settings


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "api.app:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        reload=settings.is_development and settings.workers == 1,
    )
