"""
CLI Configuration

Centralized configuration for the Orthros CLI subsystem.
"""

import os
from typing import Optional


class CLIConfig:
    """Configuration for CLI commands"""

    # Machine mode (plain, parseable output)
    _machine_mode: Optional[bool] = None

    # Skip the analysis server health check
    _offline: bool = False

    @classmethod
    def set_machine_mode(cls, enabled: bool) -> None:
        """Set machine mode (pure data output, no presentation)"""
        cls._machine_mode = enabled

    @classmethod
    def is_machine_mode(cls) -> bool:
        """
        Check if machine mode is active.

        Machine mode is the default. Returns False only if human mode is
        explicitly requested.
        """
        if cls._machine_mode is not None:
            return cls._machine_mode
        if os.getenv("ORTHROS_HUMAN_MODE", "").lower() in ("1", "true", "yes"):
            return False
        return True

    @classmethod
    def set_offline(cls, enabled: bool) -> None:
        """Run without an analysis session"""
        cls._offline = enabled

    @classmethod
    def is_offline(cls) -> bool:
        return cls._offline

    @classmethod
    def reset(cls) -> None:
        """Restore defaults (for testing)."""
        cls._machine_mode = None
        cls._offline = False
