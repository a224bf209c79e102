"""
Centralized logging configuration with categorized loggers.

This module provides a small logging system with:
- Named categories for different subsystems
- Per-category log level control
- Levels overridable through Settings (``ATMOPICS_LOG_LEVEL_<CATEGORY>``)
"""
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Dict, Optional


# Logger categories for different subsystems
class LoggerCategory:
    """Named categories for application loggers"""
    CORE = "core"            # Managers, context, records, layout
    API = "api"              # XRPC clients (records, blobs)
    IDENTITY = "identity"    # Handle resolution and DID documents
    MEDIA = "media"          # ffprobe / ffmpeg thumbnailing
    NETWORK = "network"      # HTTP session factory


# Default log levels for each category
DEFAULT_LOG_LEVELS = {
    LoggerCategory.CORE: logging.INFO,
    LoggerCategory.API: logging.INFO,
    LoggerCategory.IDENTITY: logging.INFO,
    LoggerCategory.MEDIA: logging.INFO,
    LoggerCategory.NETWORK: logging.WARNING,
}


# Map module names to categories
MODULE_TO_CATEGORY = {
    # Core
    'atmopics.core': LoggerCategory.CORE,
    'atmopics.core.context': LoggerCategory.CORE,
    'atmopics.core.content_manager': LoggerCategory.CORE,
    'atmopics.core.config': LoggerCategory.CORE,
    'atmopics.core.blobs': LoggerCategory.CORE,

    # API
    'atmopics.core.api': LoggerCategory.API,
    'atmopics.core.api.base': LoggerCategory.API,
    'atmopics.core.api.repo': LoggerCategory.API,
    'atmopics.core.api.blobs': LoggerCategory.API,

    # Identity
    'atmopics.core.api.identity': LoggerCategory.IDENTITY,

    # Network
    'atmopics.core.http_client': LoggerCategory.NETWORK,

    # Media
    'atmopics.media': LoggerCategory.MEDIA,
    'atmopics.media.processor': LoggerCategory.MEDIA,
}


class LoggingManager:
    """Manages application-wide logging configuration"""

    def __init__(self, log_dir: Optional[Path] = None, settings=None):
        """
        Initialize logging manager.

        Args:
            log_dir: Directory for log files (None logs to console only)
            settings: Settings instance for per-category overrides
        """
        self.log_dir = log_dir
        self.settings = settings
        self._category_levels: Dict[str, int] = {}
        self._load_levels()

    def _load_levels(self):
        """Load log levels from settings, falling back to defaults"""
        self._category_levels = DEFAULT_LOG_LEVELS.copy()
        if not self.settings:
            return

        for category, default_level in DEFAULT_LOG_LEVELS.items():
            level_name = self.settings.get_config(f'log_level_{category}', logging.getLevelName(default_level))
            level = logging.getLevelName(str(level_name).upper())
            if isinstance(level, int):
                self._category_levels[category] = level

    def get_category_level(self, category: str) -> int:
        """Get log level for a category"""
        return self._category_levels.get(category, logging.INFO)

    def set_category_level(self, category: str, level: int):
        """Set log level for a category"""
        self._category_levels[category] = level
        self._apply_category_level(category, level)

    def _apply_category_level(self, category: str, level: int):
        """Apply level to all loggers in a category"""
        for module_name, cat in MODULE_TO_CATEGORY.items():
            if cat == category:
                logging.getLogger(module_name).setLevel(level)

    def setup_logging(self, root_level: int = logging.INFO):
        """
        Setup application logging with categories.

        Args:
            root_level: Root logger level (default: INFO)
        """
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        handlers = []
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                self.log_dir / "atmopics.log",
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        handlers.append(stream_handler)

        root_logger = logging.getLogger()
        root_logger.setLevel(root_level)

        # Remove existing handlers
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
        for handler in handlers:
            root_logger.addHandler(handler)

        for category, level in self._category_levels.items():
            self._apply_category_level(category, level)

        # Silence noisy third-party loggers
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('requests').setLevel(logging.WARNING)
        logging.getLogger('aiohttp').setLevel(logging.WARNING)
        logging.getLogger('asyncio').setLevel(logging.WARNING)

    def get_all_levels(self) -> Dict[str, int]:
        """Get all category log levels"""
        return self._category_levels.copy()


# Global instance
_logging_manager: Optional[LoggingManager] = None


def get_logging_manager(settings=None, log_dir: Optional[Path] = None) -> LoggingManager:
    """Get or create the global logging manager"""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager(log_dir=log_dir, settings=settings)
    return _logging_manager


def setup_logging(settings=None, log_dir: Optional[Path] = None) -> LoggingManager:
    """Setup application logging (convenience function)"""
    manager = get_logging_manager(settings, log_dir)
    root_level = logging.INFO
    if settings is not None:
        level = logging.getLevelName(str(settings.get_config("log_level")).upper())
        if isinstance(level, int):
            root_level = level
    manager.setup_logging(root_level)
    return manager
