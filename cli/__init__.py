"""
CLI tools for the ocean annotation game.

Available commands:
    python -m cli.score      # Score a player's rectangles against an image's targets
    python -m cli.render     # Draw player and ground-truth rectangles over an image
    python -m cli.replay     # Replay recorded pointer events through the box editor
"""

import sys

from loguru import logger

from src.core.config import settings


def setup_logging(verbose: bool = False) -> None:
    """Send log output to stderr at DEBUG when verbose, else at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else settings.log_level)
