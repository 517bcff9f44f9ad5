"""signalmice: powers off the host when a signal key appears in Redis."""

__version__ = "1.0.0"
