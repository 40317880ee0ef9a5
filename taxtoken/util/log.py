import sys


COLORS = {
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "red": "\033[31m",
    "magenta": "\033[35m",
    "reset": "\033[0m",
}

LEVEL_COLORS = {
    "info": "cyan",
    "success": "green",
    "warn": "yellow",
    "error": "red",
    "debug": "magenta",
}


def _supports_color(stream) -> bool:
    """
    Skip ANSI codes when the target stream is not a TTY (pipes, pytest capture).
    """
    return hasattr(stream, "isatty") and stream.isatty()


def colorize(message: str, color: str, stream=None) -> str:
    if not _supports_color(stream or sys.stdout):
        return message
    code = COLORS.get(color, "")
    reset = COLORS["reset"] if code else ""
    return f"{code}{message}{reset}"


def log(message: str, level: str = "info"):
    # warnings and errors go to stderr
    stream = sys.stderr if level in ("warn", "error") else sys.stdout
    print(colorize(message, LEVEL_COLORS.get(level, "reset"), stream), file=stream)


def log_info(message: str):
    log(message, "info")


def log_success(message: str):
    log(message, "success")


def log_warn(message: str):
    log(message, "warn")
