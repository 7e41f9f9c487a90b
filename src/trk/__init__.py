"""trk - track working time against a git repository."""

__version__ = "0.3.0"
