from .words import Word


__all__ = [
    "Word",
]
