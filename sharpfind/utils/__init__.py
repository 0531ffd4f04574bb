"""Parsing, formatting and platform helpers."""
