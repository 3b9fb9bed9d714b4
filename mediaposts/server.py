"""Run the API with uvicorn (``mediaposts`` console script)."""

import uvicorn

from mediaposts.core.config import settings


def main() -> None:
    uvicorn.run("mediaposts.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
