from __future__ import annotations

import uvicorn

from devkit.config import load_settings


def main() -> None:
    settings = load_settings("school-service")
    uvicorn.run("school_service.app:app", host=settings.HOST, port=settings.PORT, reload=False)


if __name__ == "__main__":
    main()
