import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_MODES = ('debug', 'info', 'off')

# Current mode, changed by set_log_mode() once the config has been loaded
_log_mode = 'info'
_log_file: Optional[Path] = None


def _levels_for_mode(log_mode: str):
    """Return (logger level, console handler level) for a log mode."""
    if log_mode == 'debug':
        return logging.DEBUG, logging.DEBUG
    if log_mode == 'off':
        # Higher than CRITICAL disables everything
        return logging.CRITICAL + 1, logging.CRITICAL + 1
    return logging.INFO, logging.INFO


def _configure(logger: logging.Logger):
    """Bring a logger's level and handlers in line with the current mode."""
    log_format = logging.Formatter(LOG_FORMAT)
    logger_level, console_level = _levels_for_mode(_log_mode)
    logger.setLevel(logger_level)

    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    want_file = _log_mode != 'off' and _log_file is not None

    # Remove file handlers that are no longer wanted or point at another file
    for handler in file_handlers:
        if not want_file or Path(handler.baseFilename) != _log_file.resolve():
            handler.close()
            logger.removeHandler(handler)

    if want_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        _log_file.parent.mkdir(parents=True, exist_ok=True)
        f_handler = logging.FileHandler(_log_file)
        f_handler.setLevel(logging.DEBUG)
        f_handler.setFormatter(log_format)
        logger.addHandler(f_handler)

    console_handlers = [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]
    if not console_handlers:
        c_handler = logging.StreamHandler()
        c_handler.setFormatter(log_format)
        logger.addHandler(c_handler)
        console_handlers = [c_handler]
    for handler in console_handlers:
        handler.setLevel(console_level)


def set_log_mode(log_mode: str, log_file: Optional[str] = None):
    """Change the log mode and update all loggers created by get_logger()."""
    global _log_mode, _log_file
    if log_mode not in LOG_MODES:
        raise ValueError(f"log mode must be one of {', '.join(LOG_MODES)}, got '{log_mode}'")
    _log_mode = log_mode
    _log_file = Path(log_file) if log_file else None

    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        if not logger_name.startswith('transapi'):
            continue
        logger = logging.getLogger(logger_name)
        if logger.handlers:
            _configure(logger)


def get_log_mode() -> str:
    return _log_mode


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    _configure(logger)
    return logger
