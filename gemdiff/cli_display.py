import logging
import os
from datetime import datetime


def setup_logger(log_dir: str = ".gemdiff/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"gemdiff_{timestamp}.log")

    logger = logging.getLogger("gemdiff")
    logger.setLevel(logging.DEBUG)

    # One log file per process: drop any handler from an earlier call
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    # File handler captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


def print_stream_text(text: str, thought: bool = False) -> None:
    """Echo a chunk of streamed model output; thoughts are dimmed."""
    if thought:
        print(f"\033[2m{text}\033[0m", end="", flush=True)
    else:
        print(text, end="", flush=True)


def print_warning(message: str) -> None:
    print(f"\n  \033[33m[WARN]\033[0m {message}")


def print_error(message: str) -> None:
    print(f"\n  \033[31m[ERROR]\033[0m {message}")


def print_success(message: str) -> None:
    print(f"\n  \033[32m✔\033[0m {message}")
