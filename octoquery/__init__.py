"""SQL value types, byte and string helpers, and physical query plan structures."""

__version__ = "0.1.0"

__all__ = [
    "arena",
    "bytebuffer",
    "environment",
    "expression",
    "nodes",
    "querytypes",
    "transform",
]