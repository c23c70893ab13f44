"""
Orthros Path Configuration

Centralized path management for Orthros data files and document URIs.
Project paths are relative to the project root (current working directory).

Directory Structure:
.orthros/
├── config.json          # Local config overrides
└── logs/                # Log files (opt-in)
"""

from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse


class OrthrosPaths:
    """
    Centralized path configuration for Orthros.

    All paths are lazily resolved relative to project_root.
    Default project_root is current working directory.
    """

    ORTHROS_DIR = ".orthros"
    GLOBAL_DIR = Path.home() / ".orthros"

    CONFIG_NAME = "config.json"
    LOGS_DIR = "logs"

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize paths configuration.

        Args:
            project_root: Root directory for the project. Defaults to CWD.
        """
        self._project_root = project_root

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        if self._project_root is None:
            return Path.cwd()
        return self._project_root

    @property
    def orthros_dir(self) -> Path:
        """Get the .orthros directory path."""
        return self.project_root / self.ORTHROS_DIR

    @property
    def local_config(self) -> Path:
        """Get the project-local config file path."""
        return self.orthros_dir / self.CONFIG_NAME

    @property
    def global_config(self) -> Path:
        """Get the user-wide config file path."""
        return self.GLOBAL_DIR / self.CONFIG_NAME

    @property
    def logs_dir(self) -> Path:
        """Get the logs directory path."""
        return self.orthros_dir / self.LOGS_DIR

    def ensure_dirs(self) -> None:
        """Create all necessary directories if they don't exist."""
        self.orthros_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(exist_ok=True)


# Global instance for convenience
_default_paths: Optional[OrthrosPaths] = None


def get_paths(project_root: Optional[Path] = None) -> OrthrosPaths:
    """
    Get the paths configuration.

    Args:
        project_root: Optional project root override

    Returns:
        OrthrosPaths instance
    """
    global _default_paths
    if project_root is not None:
        return OrthrosPaths(project_root)
    if _default_paths is None:
        _default_paths = OrthrosPaths()
    return _default_paths


def reset_paths() -> None:
    """Reset the global paths instance (useful for testing)."""
    global _default_paths
    _default_paths = None


def path_to_uri(path: Path) -> str:
    """Convert a filesystem path to a file:// document URI."""
    return Path(path).resolve().as_uri()


def uri_to_path(uri: str) -> Path:
    """
    Convert a document URI to a filesystem path.

    Non-file URIs (untitled buffers) are returned as a bare path of their
    opaque part, which the analysis server treats as an in-memory module.
    """
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return Path(unquote(parsed.path or uri))
    return Path(unquote(parsed.path))
