"""SharpFind: fast file search over a directory walk or the OS search index."""

__version__ = "1.0.0"
