from __future__ import annotations
import uvicorn

from .core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("pyden_site.main:app", host=settings.host, port=settings.port, proxy_headers=True, server_header=False)
