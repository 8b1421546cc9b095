import uvicorn

from app.core.settings import settings


def run() -> None:
    """Console entry point: serve the API on ``HOST``/``PORT``."""
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    run()
