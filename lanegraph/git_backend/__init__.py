"""Git backend feeding the commit graph"""

from lanegraph.git_backend.repository import GraphRepository

__all__ = ["GraphRepository"]
