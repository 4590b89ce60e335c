"""Policy-switchable response cache service."""

__version__ = "0.3.0"
