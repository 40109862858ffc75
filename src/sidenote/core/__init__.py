"""Core value types shared by the editor and annotation layers."""

from .ranges import TextRange

__all__ = ["TextRange"]
