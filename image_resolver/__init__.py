"""
Character image resolver.

Locates a reference image for a character number, caches it in object storage,
and falls back to synthetic generation when no reference image exists.
"""

__version__ = '1.0.0'
