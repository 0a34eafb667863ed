"""Core reconciliation machinery for railctl.

This package contains the project context provider, schema loading,
file generators, merge utilities, install state, and the engine.
"""
