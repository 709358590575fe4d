"""Extended character lookup table.

Jira's Jelly runner does not reliably survive raw non-ASCII characters in a
script, so after a style sheet has been applied every character found in
the table is rewritten as a character reference.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple, Union

import yaml
from loguru import logger

# Latin-1 supplement plus the punctuation word processors like to insert.
_DEFAULT_CODEPOINTS = list(range(0xA0, 0x100)) + [
    0x0152,  # OE ligature
    0x0153,
    0x0160,
    0x0161,
    0x0178,
    0x017D,
    0x017E,
    0x0192,
    0x02C6,
    0x02DC,
    0x2013,  # en dash
    0x2014,  # em dash
    0x2018,
    0x2019,
    0x201A,
    0x201C,
    0x201D,
    0x201E,
    0x2020,
    0x2021,
    0x2022,
    0x2026,  # ellipsis
    0x2030,
    0x2039,
    0x203A,
    0x20AC,  # euro
    0x2122,
]


def _parse_codepoint(key: Any) -> str:
    """Turn a table key into the single character it names.

    Accepts the character itself, an integer codepoint, ``U+00E9`` or
    ``0xE9``.
    """
    if isinstance(key, bool):
        raise ValueError(f'Invalid character map key: {key!r}')
    if isinstance(key, int):
        return chr(key)
    if not isinstance(key, str) or not key:
        raise ValueError(f'Invalid character map key: {key!r}')
    if len(key) == 1:
        return key

    upper = key.upper()
    if upper.startswith('U+'):
        return chr(int(key[2:], 16))
    if upper.startswith('0X'):
        return chr(int(key[2:], 16))
    raise ValueError(f'Invalid character map key: {key!r}')


class CharacterMap(Mapping):
    """Immutable mapping of single characters to replacement strings."""

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        """Initialize character map.

        Args:
            entries: Character to replacement mapping

        Raises:
            ValueError: If a key is not a single non-ASCII character or a
                replacement is not a string
        """
        table = {}
        for char, replacement in (entries or {}).items():
            if not isinstance(char, str) or len(char) != 1:
                raise ValueError(f'Character map keys must be single characters: {char!r}')
            if ord(char) < 0x80:
                raise ValueError(f'Character map keys must be non-ASCII: {char!r}')
            if not isinstance(replacement, str):
                raise ValueError(f'Replacement for {char!r} must be a string')
            table[char] = replacement
        self._table = MappingProxyType(table)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[Any, str]]) -> 'CharacterMap':
        """Build a map from (key, replacement) pairs.

        A key that appears more than once keeps its last replacement.
        """
        table = {}
        for key, replacement in pairs:
            char = _parse_codepoint(key)
            if char in table and table[char] != replacement:
                logger.debug(
                    f'Character map entry U+{ord(char):04X} redefined: '
                    f'{table[char]!r} -> {replacement!r}'
                )
            table[char] = replacement
        return cls(table)

    @classmethod
    def default(cls) -> 'CharacterMap':
        """Map Latin-1 and common punctuation to numeric references."""
        return cls.from_pairs((cp, f'&#{cp};') for cp in _DEFAULT_CODEPOINTS)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'CharacterMap':
        """Load a character map from a YAML file.

        The file holds either a mapping of keys to replacements or a list of
        ``[key, replacement]`` pairs.
        """
        map_file = Path(path)
        if not map_file.exists():
            raise FileNotFoundError(f'Character map file not found: {path}')

        with open(map_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if data is None:
            return cls()
        if isinstance(data, dict):
            return cls.from_pairs(data.items())
        if isinstance(data, list):
            return cls.from_pairs((item[0], item[1]) for item in data)
        raise ValueError(f'Unsupported character map format in {path}')

    def apply(self, text: str) -> str:
        """Replace every mapped character in ``text``.

        Characters not in the table pass through unchanged.
        """
        table = self._table
        return ''.join(table.get(char, char) for char in text)

    def encode(self, data: bytes, encoding: str = 'utf-8') -> bytes:
        """Decode ``data``, replace mapped characters and re-encode it."""
        return self.apply(data.decode(encoding)).encode(encoding)

    def __getitem__(self, char: str) -> str:
        return self._table[char]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f'CharacterMap({len(self)} entries)'
