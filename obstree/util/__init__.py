"""
obstree Utilities
=================

Classes:
- HandleArena: generational arena used as the identity side table of a tree
"""

from .arena import HandleArena

__all__ = ["HandleArena"]
