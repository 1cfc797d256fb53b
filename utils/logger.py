import logging
import sys
from logging.handlers import RotatingFileHandler

from utils.constants import LOGS_DIR, LOG_FILE_NAME


class Logger:
    """Named logger with console and rotating file output."""

    _configured = False

    @classmethod
    def setup(cls, settings: dict):
        """
        Global configuration for all Logger instances.

        Args:
            settings: Dictionary containing 'level', 'rotation', 'backup_count'
                      and optionally 'file' (False disables the rotating file).
        """
        if cls._configured:
            return

        level_name = str(settings.get('level', 'INFO')).upper()
        level = getattr(logging, level_name, logging.INFO)

        # Configure root logger to affect all modules
        root = logging.getLogger()
        root.setLevel(level)

        if not root.handlers:
            formatter = logging.Formatter(
                '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

            # 1. Console Handler
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            root.addHandler(console_handler)

            # 2. File Handler (Rotating)
            if settings.get('file', True):
                try:
                    LOGS_DIR.mkdir(exist_ok=True)
                    file_handler = RotatingFileHandler(
                        LOGS_DIR / LOG_FILE_NAME,
                        maxBytes=cls._parse_rotation(settings.get('rotation', '5MB')),
                        backupCount=settings.get('backup_count', 5)
                    )
                    file_handler.setFormatter(formatter)
                    root.addHandler(file_handler)
                except OSError as e:
                    root.warning(f"Failed to initialize file logger: {e}")

        cls._configured = True

    @staticmethod
    def _parse_rotation(value) -> int:
        """Parse a rotation size string ("5MB", "512KB") into bytes."""
        rot_str = str(value).upper()
        max_bytes = 5 * 1024 * 1024  # Default
        if 'MB' in rot_str:
            try:
                max_bytes = int(rot_str.replace('MB', '')) * 1024 * 1024
            except ValueError:
                pass
        elif 'KB' in rot_str:
            try:
                max_bytes = int(rot_str.replace('KB', '')) * 1024
            except ValueError:
                pass
        return max_bytes

    def __init__(self, name: str = "Magnifier"):
        self.logger = logging.getLogger(name)

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def debug(self, message: str):
        self.logger.debug(message)

    def critical(self, message: str):
        self.logger.critical(message)
