from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "WARNING", log_file: str | None = None) -> logging.Handler:
    """Attach one handler to the ``raytail`` logger.

    Logs go to ``log_file`` when set, otherwise to stderr so they never
    interleave with the live view on stdout.
    """

    handler: logging.Handler
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)

    root = logging.getLogger("raytail")
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.WARNING))
    return handler
