import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    component: str = "bridge",
    base_dir: Optional[str | Path] = "logs",
    backup_days: int = 14,
) -> Optional[Path]:
    """
    Configure root logging for the long-running bridge:
      - Console (stdout)
      - logs/<component>/<component>.log, rotated at UTC midnight and kept
        for ``backup_days`` days

    ``base_dir=None`` logs to the console only.

    Returns:
      Path to the active log file, or None.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(LOG_FORMAT)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    root.addHandler(sh)

    if base_dir is None:
        return None

    log_dir = Path(base_dir) / component
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{component}.log"
    fh = logging.handlers.TimedRotatingFileHandler(
        log_path,
        when="midnight",
        utc=True,
        backupCount=max(0, int(backup_days)),
        encoding="utf-8",
    )
    fh.setFormatter(fmt)
    root.addHandler(fh)
    return log_path
