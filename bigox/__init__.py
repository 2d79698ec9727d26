"""BigOX: CQRS dispatch and handler decoration on top of a small DI container."""

__version__ = "0.1.0"
