from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

import yaml

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s]: %(message)s'


def configure_logging(config_path: Optional[Path] = None, default_level: int = logging.WARNING) -> logging.Logger:
    """Configure root logging from the `log_level` key of a YAML file.

    A missing or unreadable file keeps `default_level`. Returns the
    package logger.
    """
    level = default_level
    cfg_path = Path(config_path) if config_path is not None else None
    if cfg_path is not None and cfg_path.exists():
        try:
            with cfg_path.open('r', encoding='utf-8') as _f:
                _cfg = yaml.safe_load(_f) or {}
        except (OSError, yaml.YAMLError) as err:
            logging.getLogger(__name__).warning('Could not read %s: %s', cfg_path, err)
            _cfg = {}
        _lvl = _cfg.get('log_level') if isinstance(_cfg, dict) else None
        if _lvl:
            level = getattr(logging, str(_lvl).upper(), default_level)

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.log(100, f'[valuepath]: Log level set to: {logging.getLevelName(level)}')

    return logging.getLogger('valuepath')
