"""
Start the matchchats API server for local development
"""
import sys

import uvicorn

from matchchats.core.config import settings

if __name__ == "__main__":
    print("Starting matchchats server...")
    print(f"Python: {sys.version}")
    print(f"Directory API: {settings.directory_api_url}")

    try:
        uvicorn.run(
            "matchchats.main:app",
            host="127.0.0.1",
            port=8000,
            reload=settings.debug,
            log_level=settings.log_level.lower(),
        )
    except KeyboardInterrupt:
        print("\nServer stopped by user")
