# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging setup for applications built on itembag.

Console logging is always on. File logging writes ``itembag.log`` in a
``logs`` folder, rotated at midnight with a week of history, and can be
turned off with the ``ITEMBAG_EDITOR_ENABLE_FILE_LOGGING`` environment
variable or a ``logging.config`` file containing ``false``.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from collections.abc import Mapping
from pathlib import Path

ENV_FILE_LOGGING = 'ITEMBAG_EDITOR_ENABLE_FILE_LOGGING'
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_FILENAME = 'itembag.log'
BACKUP_COUNT = 7

_ENABLED_VALUES = ('true', '1', 'yes')


def should_enable_file_logging(
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
) -> bool:
    """Decide whether file logging is on.

    The environment variable wins when set; otherwise the config file is
    read; with neither, file logging is enabled.
    """
    environ = os.environ if environ is None else environ
    value = environ.get(ENV_FILE_LOGGING, '')
    if value:
        return value.strip().lower() in _ENABLED_VALUES

    if config_path is not None:
        path = Path(config_path)
        if path.is_file():
            try:
                return path.read_text(encoding='utf-8').strip().lower() in _ENABLED_VALUES
            except OSError:
                return False
    return True


def configure_logging(
    enable_file_logging: bool | None = None,
    log_dir: str | Path = 'logs',
    level: int = logging.DEBUG,
    logger_name: str = 'itembag',
) -> logging.Logger:
    """Install console (and optionally file) handlers on ``logger_name``.

    Calling it again replaces the handlers installed by a previous call.

    Args:
        enable_file_logging: None means decide with should_enable_file_logging().
        log_dir: Folder for the rotating log file, created if missing.
        level: Minimum level for the logger.
        logger_name: Logger to configure ('' for the root logger).

    Returns:
        The configured logger.
    """
    if enable_file_logging is None:
        enable_file_logging = should_enable_file_logging(
            config_path=Path(log_dir).parent / 'logging.config'
        )

    target = logging.getLogger(logger_name)
    for handler in list(target.handlers):
        if getattr(handler, '_itembag_handler', False):
            target.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console._itembag_handler = True
    target.addHandler(console)

    if enable_file_logging:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            log_dir / LOG_FILENAME,
            when='midnight',
            backupCount=BACKUP_COUNT,
            encoding='utf-8',
        )
        file_handler.setFormatter(formatter)
        file_handler._itembag_handler = True
        target.addHandler(file_handler)

    target.setLevel(level)
    if enable_file_logging:
        target.info("File logging enabled - logs written to %s", Path(log_dir) / LOG_FILENAME)
    else:
        target.info("File logging disabled - only console logging is active")
    return target
