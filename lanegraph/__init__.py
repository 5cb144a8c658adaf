"""lanegraph - commit graph lane layout and virtualized rendering"""

__version__ = "0.1.0"
