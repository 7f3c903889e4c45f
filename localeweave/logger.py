import logging
from pathlib import Path

LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILE = LOG_DIR / "app.log"

LOG_MODES = ("off", "info", "debug")

# Process-wide log mode, changed through set_log_mode()
_log_mode = "off"

# Names of loggers handed out by get_logger()
_managed_loggers = set()

_log_format = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')


def get_log_mode() -> str:
    """Get the current log mode."""
    return _log_mode


def _levels_for_mode(log_mode: str):
    if log_mode == 'debug':
        return logging.DEBUG, logging.DEBUG
    if log_mode == 'off':
        # Off mode: a level higher than CRITICAL disables all output
        return logging.CRITICAL + 1, logging.CRITICAL + 1
    return logging.INFO, logging.INFO


def _apply_mode(logger: logging.Logger, log_mode: str) -> None:
    logger_level, console_level = _levels_for_mode(log_mode)
    logger.setLevel(logger_level)

    has_file_handler = any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    has_console_handler = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )

    if log_mode != 'off':
        if not has_file_handler:
            LOG_DIR.mkdir(exist_ok=True)
            f_handler = logging.FileHandler(LOG_FILE)
            f_handler.setLevel(logging.DEBUG)
            f_handler.setFormatter(_log_format)
            logger.addHandler(f_handler)
        if not has_console_handler:
            c_handler = logging.StreamHandler()
            c_handler.setFormatter(_log_format)
            logger.addHandler(c_handler)
    elif has_file_handler:
        handlers_to_remove = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        for handler in handlers_to_remove:
            handler.close()
            logger.removeHandler(handler)

    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(console_level)


def set_log_mode(log_mode: str) -> None:
    """Switch the log mode and update all loggers created by get_logger()."""
    global _log_mode
    if log_mode not in LOG_MODES:
        raise ValueError(f"Unknown log mode: {log_mode}. Expected one of {LOG_MODES}")
    if log_mode == _log_mode:
        return
    _log_mode = log_mode

    for logger_name in list(_managed_loggers):
        _apply_mode(logging.getLogger(logger_name), log_mode)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    _managed_loggers.add(name)
    _apply_mode(logger, _log_mode)
    return logger
