"""Dependency injection container for Neusicgen server components.

Provides centralized management of service instances with proper lifecycle
and dependency resolution.
"""

import logging
from typing import Any, Optional

from composition.sequence_generator import SequenceGenerator
from server.config import NeusicgenConfig, get_config
from server.oscillator_renderer import OscillatorRenderer

logger = logging.getLogger(__name__)


class DIContainer:
    """Dependency injection container for server components."""

    def __init__(self, config: Optional[NeusicgenConfig] = None) -> None:
        """Initialize DI container.

        Args:
            config: Configuration override (default: global configuration)
        """
        self._config = config if config is not None else get_config()
        self._instances: dict[str, Any] = {}

        logger.info("DI container initialized")

    def get_config(self) -> NeusicgenConfig:
        """Get configuration instance."""
        return self._config

    def get_sequence_generator(self) -> SequenceGenerator:
        """Get or create sequence generator instance."""
        if "sequence_generator" not in self._instances:
            self._instances["sequence_generator"] = SequenceGenerator(
                delay_range_ms=self._config.generation_delay_range_ms
            )
        return self._instances["sequence_generator"]

    def get_renderer(self) -> OscillatorRenderer:
        """Get or create oscillator renderer instance."""
        if "renderer" not in self._instances:
            self._instances["renderer"] = OscillatorRenderer(
                sample_rate=self._config.sample_rate,
                time_scale=self._config.playback_time_scale,
                attack_sec=self._config.attack_ms / 1000.0,
                hold_fraction=self._config.hold_fraction,
                peak_gain=self._config.peak_gain,
            )
        return self._instances["renderer"]

    async def cleanup(self) -> None:
        """Clean up all managed instances."""
        logger.info("Cleaning up DI container")

        # Stop any playback still holding an output device
        if "renderer" in self._instances:
            try:
                await self._instances["renderer"].stop()
            except Exception as e:
                logger.error(f"Error stopping renderer: {e}")

        self._instances.clear()
        logger.info("DI container cleaned up")


# Global container instance
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """Get the global DI container instance.

    Returns:
        DIContainer singleton
    """
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


async def cleanup_container() -> None:
    """Clean up the global DI container."""
    global _container
    if _container is not None:
        await _container.cleanup()
        _container = None
