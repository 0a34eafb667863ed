"""Bundled data files (theme and file templates)."""
