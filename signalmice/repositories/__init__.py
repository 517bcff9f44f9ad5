"""Repository layer for signal store access."""

from signalmice.repositories.signal_repository import SignalRepository

__all__ = ['SignalRepository']
