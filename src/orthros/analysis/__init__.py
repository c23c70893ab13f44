"""
Analysis server access.

The analysis server is a separate long-lived process that parses and
rewrites import blocks. This package defines the interface Orthros expects
from it and a JSON-RPC client for talking to it.
"""

from .base import AnalysisService
from .client import AnalysisClient
from .config import ANALYSIS_CONFIG, RPC_METHODS

__all__ = [
    "AnalysisService",
    "AnalysisClient",
    "ANALYSIS_CONFIG",
    "RPC_METHODS",
]
