from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

_HANDLER_MARK = "_taskboard_handler"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the terminal readable while Streamlit reruns the script:
    - taskboard logs pass at the handler level
    - watchdog/urllib3/httpx chatter only at WARNING+
    - captured Python warnings only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == "taskboard" or name.startswith("taskboard."):
            return True
        if name == "py.warnings":
            return record.levelno >= logging.ERROR
        return record.levelno >= logging.WARNING


def setup_logging(
    *,
    log_dir: Optional[Union[str, Path]] = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure root logging with a filtered console handler and, when
    ``log_dir`` is given, a file handler writing ``taskboard.log``.

    Safe to call on every rerun: handlers installed by a previous call are
    replaced, handlers owned by Streamlit are left alone.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        if getattr(h, _HANDLER_MARK, False):
            root.removeHandler(h)
            h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    setattr(ch, _HANDLER_MARK, True)
    root.addHandler(ch)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path / "taskboard.log"), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        setattr(fh, _HANDLER_MARK, True)
        root.addHandler(fh)

    logging.captureWarnings(True)
