import uvicorn

from visitor_location.config import get_settings


def main() -> None:
    """Run the location service with uvicorn using the configured bind address."""
    settings = get_settings()
    uvicorn.run(
        "visitor_location.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )


if __name__ == "__main__":
    main()
