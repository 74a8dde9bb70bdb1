"""Run the API server: python -m llm_log_api"""

import uvicorn

from llm_log_api.core.config import settings


def main() -> None:
    uvicorn.run("llm_log_api.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
