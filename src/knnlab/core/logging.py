from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .io import ensure_dir

FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def get_logger(name: str = "knnlab", level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Console (and optional file) logger. The console handler is attached once per
    logger name and each log file once per path; repeated calls adjust the level.
    """
    log = logging.getLogger(name)
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    log.setLevel(lvl)
    fmt = logging.Formatter(FORMAT)
    if not any(type(h) is logging.StreamHandler for h in log.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(fmt)
        log.addHandler(ch)
    if log_file:
        path = os.path.abspath(log_file)
        files = {h.baseFilename for h in log.handlers if isinstance(h, logging.FileHandler)}
        if path not in files:
            ensure_dir(Path(path).parent)
            fh = logging.FileHandler(path)
            fh.setFormatter(fmt)
            log.addHandler(fh)
    for h in log.handlers:
        h.setLevel(lvl)
    return log
