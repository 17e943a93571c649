"""Building blocks for a versioned AVL+ key-value store: encodings, caches, fast nodes, export compression and in-memory stores."""

__version__ = "0.1.0"

__all__ = [
    "batch",
    "cache",
    "color",
    "compress",
    "encoding",
    "fastnode",
    "hexbytes",
    "memdb",
    "prefixdb",
    "rand",
]