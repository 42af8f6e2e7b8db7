"""draft-release: keep a draft GitHub release and its notes up to date."""

__version__ = "0.1.0"
