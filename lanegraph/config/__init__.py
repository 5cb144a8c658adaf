"""Application configuration"""

from lanegraph.config.settings import Settings

__all__ = ["Settings"]
