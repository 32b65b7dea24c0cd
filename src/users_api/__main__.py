"""Run the API server with uvicorn."""

import uvicorn

from .api import app
from .config import settings


def main() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
