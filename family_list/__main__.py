from .core.config import settings
from .main import app
from .server import Server


def main() -> None:
    Server(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    ).run()


if __name__ == "__main__":
    main()
