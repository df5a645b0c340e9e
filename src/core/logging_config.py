"""
Centralized logging configuration.

Logs go to stdout and to a daily file under ``logs/``. Every module gets
its logger through ``get_logger(__name__)`` so the hierarchy mirrors the
package layout (``src.services.survey_repository`` and so on).
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


# Guards against duplicate handlers when the app module is re-imported
_logging_configured = False

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty below WARNING
NOISY_LOGGERS = ("httpx", "httpcore", "groq", "sqlalchemy.engine", "urllib3")


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Configure application-wide logging.
    
    Call once at startup; repeated calls return the root logger untouched.
    
    Args:
        log_level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files. Defaults to 'logs/' in project root.
        
    Returns:
        Configured root logger instance
    """
    global _logging_configured
    
    if _logging_configured:
        return logging.getLogger()
    
    if log_dir is None:
        log_dir = Path(__file__).parent.parent.parent / "logs"
    log_dir.mkdir(exist_ok=True)
    
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    
    # The file keeps everything, including DEBUG
    log_file = log_dir / f"service_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)
    
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)
    
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    
    _logging_configured = True
    root_logger.debug(f"Logging configured: level={log_level}, file={log_file}")
    
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.
    
    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Stored survey response")
        2026-01-15 10:30:45 | INFO     | src.services.survey_repository:42 | Stored survey response
    """
    return logging.getLogger(name)
