"""
CLI Command Modules

Each module contains a logical group of related commands.
"""

from orthros.cli import imports

__all__ = ['imports']
