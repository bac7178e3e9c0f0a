"""
.. include:: ../README.md
"""

__all__ = [
    "manifest",
    "containers",
    "builder",
    "apphost",
    "processors",
    "pipeline",
    "selector",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
