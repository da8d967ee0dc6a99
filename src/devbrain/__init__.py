"""DevBrain - personal knowledge capture with AI structuring and practice."""

__version__ = "0.1.0"
