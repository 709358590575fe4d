"""Style sheet transformation of issue files."""

from .charmap import CharacterMap
from .stylesheet import StyleSheetTransformer, transform

__all__ = ['CharacterMap', 'StyleSheetTransformer', 'transform']
