"""Core search engine: filter model, candidate sources and result streaming."""
