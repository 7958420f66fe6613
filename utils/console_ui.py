"""Console output for the messenger CLI, with plain-text fallbacks."""
from __future__ import annotations

import os
import shutil
import sys
from typing import Dict, Optional

try:  # optional dependency
    import colorama
    from colorama import Fore, Style
except ImportError:  # pragma: no cover - optional dep
    colorama = None
    Fore = None  # type: ignore[assignment]
    Style = None  # type: ignore[assignment]

try:  # optional dependency
    import pyfiglet
except ImportError:  # pragma: no cover - optional dep
    pyfiglet = None

__all__ = [
    "init",
    "banner",
    "section",
    "kv",
    "bullet",
    "info",
    "success",
    "warning",
    "error",
    "elapsed",
    "rule",
    "line",
]

_FANCY_SYMBOLS = {"success": "✓", "warning": "!", "error": "✗", "info": "i", "bullet": "•"}
_PLAIN_SYMBOLS = {"success": "[OK]", "warning": "[!]", "error": "[X]", "info": "[i]", "bullet": "-"}

_width = 100
_plain_mode = True
_use_color = False
_symbols: Dict[str, str] = dict(_PLAIN_SYMBOLS)
_colors: Dict[str, str] = {}


def _stdout_is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:  # closed stream
        return False


def init(plain: bool = False) -> None:
    """Choose plain or decorated output; decorated output needs a TTY and no NO_COLOR."""

    global _width, _plain_mode, _use_color, _symbols, _colors

    _width = shutil.get_terminal_size(fallback=(100, 24)).columns or 100
    _plain_mode = plain or bool(os.environ.get("NO_COLOR")) or not _stdout_is_tty()
    _use_color = not _plain_mode and colorama is not None
    if _use_color:
        colorama.init(autoreset=True)

    _symbols = dict(_PLAIN_SYMBOLS if _plain_mode else _FANCY_SYMBOLS)
    if _use_color:
        _colors = {
            "success": Fore.GREEN + Style.BRIGHT,
            "warning": Fore.YELLOW + Style.BRIGHT,
            "error": Fore.RED + Style.BRIGHT,
            "info": Fore.CYAN,
        }
    else:
        _colors = {}


def _emit(kind: str, msg: str, *, stream=None) -> None:
    text = f"{_symbols[kind]} {msg}"
    prefix = _colors.get(kind)
    if prefix:
        text = f"{prefix}{text}{Style.RESET_ALL}"
    print(text, file=stream or sys.stdout)


def rule(char: str = "=", width: Optional[int] = None) -> None:
    count = width if width is not None else _width
    print(char * max(1, count))


def line() -> None:
    rule("-")


def banner(title: str) -> None:
    """Large heading; a figlet rendering when decorated output is on."""

    if not _plain_mode and pyfiglet is not None:
        print(pyfiglet.figlet_format(title, width=_width))
        return
    print(f"=== {title} ===".center(_width))


def section(title: str) -> None:
    rule("=")
    print(f" {title.upper()}")
    rule("=")


def kv(key: str, value: str) -> None:
    print(f"{key}: {value}")


def bullet(msg: str) -> None:
    print(f"{_symbols['bullet']} {msg}")


def info(msg: str) -> None:
    _emit("info", msg)


def success(msg: str) -> None:
    _emit("success", msg)


def warning(msg: str) -> None:
    _emit("warning", msg)


def error(msg: str) -> None:
    _emit("error", msg, stream=sys.stderr)


def elapsed(prefix: str, seconds: float) -> None:
    print(f"{prefix} {seconds:.2f}s")
