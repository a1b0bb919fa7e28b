"""
Black formatter for rendered schema modules.
"""

from __future__ import annotations

import logging

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class BlackFormatter(Formatter):
    """Formatter using black."""

    def __init__(self):
        self._black = None
        self._available = None

    def is_available(self) -> bool:
        """Check if black is installed."""
        if self._available is None:
            try:
                import black

                self._black = black
                self._available = True
            except ImportError:
                logger.debug("black is not installed, rendered code is left unformatted")
                self._available = False
        return self._available

    def _target_versions(self, target_version: str) -> set:
        black = self._black
        if not target_version:
            return set()
        name = target_version.upper()
        if hasattr(black.TargetVersion, name):
            return {getattr(black.TargetVersion, name)}
        logger.warning("Unknown black target version %s, using black's default", target_version)
        return set()

    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format Python code using black.

        Args:
            code: Rendered module
            config: Formatter configuration

        Returns:
            Formatted code, or `code` unchanged when black is missing or
            rejects the input
        """
        if not self.is_available():
            return code

        black = self._black
        mode = black.Mode(
            target_versions=self._target_versions(config.target_version),
            line_length=config.line_length,
            string_normalization=config.string_normalization,
            magic_trailing_comma=config.magic_trailing_comma,
        )

        try:
            return black.format_str(code, mode=mode)
        except black.InvalidInput as e:
            logger.warning("black could not parse the rendered module: %s", e)
            return code


def format_with_black(
    code: str,
    line_length: int = 100,
    target_version: str = "py312",
) -> str:
    """
    Convenience function to format a rendered module with black.

    Args:
        code: Python source code
        line_length: Maximum line length
        target_version: Python version target (e.g., "py312")

    Returns:
        Formatted code
    """
    formatter = BlackFormatter()
    config = FormatterConfig(
        enabled=True,
        line_length=line_length,
        target_version=target_version,
    )
    return formatter.format(code, config)
