import logging
from pathlib import Path

from rich.logging import RichHandler

_handler = RichHandler(show_path=False, show_time=False, show_level=False, markup=False)


def _setup_root_logger() -> None:
    logger = logging.getLogger("formpatch")
    logger.setLevel(logging.DEBUG)
    _handler.setLevel(logging.INFO)
    _handler.setFormatter(logging.Formatter("%(name)s: %(levelname)s: %(message)s"))
    logger.addHandler(_handler)


def set_console_level(level: int) -> None:
    """Level of the messages shown on the terminal. Debug shows every probe of the selector."""
    _handler.setLevel(level)


def add_file_handler(path: Path | str, level: int = logging.DEBUG, *, print_path: bool = True) -> None:
    logger = logging.getLogger("formpatch")
    handler = logging.FileHandler(path)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(handler)
    if print_path:
        print(f"Logging to '{path}'")


_setup_root_logger()
logger = logging.getLogger("formpatch")
