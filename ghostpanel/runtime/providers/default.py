"""
Default runtime provider.
"""

__all__ = ["Default"]

from .bolt import Bolt


class Default(Bolt):
    pass
