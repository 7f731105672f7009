"""Knowledge-base indexer — chunk, embed, store, and search documents."""

__version__ = "0.1.0"
