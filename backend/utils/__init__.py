from .logger import setup_logging, get_logger, ContextLogger, split_logger

__all__ = [
    "setup_logging",
    "get_logger",
    "ContextLogger",
    "split_logger",
]
