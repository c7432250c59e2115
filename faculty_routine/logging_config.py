import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(*, level: str = "INFO", to_file: bool = False, file_path: str = "logs/faculty_routine.log", max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5) -> None:
    root = logging.getLogger()
    # Drop handlers from earlier setup_logging/basicConfig calls
    for h in list(root.handlers):
        root.removeHandler(h)

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Console handler on stderr, so command output on stdout stays clean
    console = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False)
    console.setFormatter(logging.Formatter(fmt="%(name)s %(message)s", datefmt=DATE_FORMAT))
    root.addHandler(console)

    if to_file:
        try:
            path = Path(file_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
            fh.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
            root.addHandler(fh)
        except OSError as e:
            logging.getLogger(__name__).warning("Failed to setup file logging: %s", e)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
