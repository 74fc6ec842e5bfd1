"""
Data types shared by the translation passes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple, Union

# ================================================================
# ALIGNMENT SYMBOLS
# ================================================================
class AlignmentSymbol(Enum):
    """Per-position tag produced by the decoder."""
    MATCH = 'M'
    RANDOM_BOUNDARY = 'R'
    INSERTION = 'I'
    GAP = '-'
    UNDETERMINED = ' '

    @classmethod
    def from_char(cls, ch: str) -> 'AlignmentSymbol':
        """Look up a symbol by its one-character code."""
        return cls(ch)

    @property
    def is_aligned(self) -> bool:
        """True for symbols that belong to an alignment run."""
        return self not in (AlignmentSymbol.GAP, AlignmentSymbol.UNDETERMINED)

    @property
    def is_match(self) -> bool:
        return self in (AlignmentSymbol.MATCH, AlignmentSymbol.RANDOM_BOUNDARY)

    def __str__(self) -> str:
        return self.value


SymbolLike = Union[AlignmentSymbol, str]


def as_symbol(value: SymbolLike) -> AlignmentSymbol:
    if isinstance(value, AlignmentSymbol):
        return value
    return AlignmentSymbol.from_char(value)


def symbols_from_string(text: str) -> List[AlignmentSymbol]:
    """Parse a symbol track such as 'MMMR-- ' back into symbols."""
    return [AlignmentSymbol.from_char(ch) for ch in text]


def symbols_to_string(symbols: Iterable[SymbolLike]) -> str:
    """Render symbols as a printable track, one character per position."""
    return ''.join(as_symbol(s).value for s in symbols)

# ================================================================
# ALIGNMENT RUN RECORD
# ================================================================
@dataclass(frozen=True)
class AlignmentRun:
    start: int           # 1-based, inclusive
    end: int             # 1-based, inclusive
    match_count: int
    mismatch_count: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.start, self.end, self.match_count, self.mismatch_count)

# ================================================================
# TRANSLATION PARAMETERS
# ================================================================
DEFAULT_GAP_LENGTH_CUTOFF = 29

@dataclass
class TranslateParams:
    """
    Parameters shared by derandomization and decoding.

    gap_length_cutoff separates insertions from gaps in the decoder.
    It is an empirical setting, not a derived quantity.
    """
    k: int
    threshold: int
    gap_length_cutoff: int = DEFAULT_GAP_LENGTH_CUTOFF


__all__ = [
    'AlignmentSymbol',
    'AlignmentRun',
    'TranslateParams',
    'DEFAULT_GAP_LENGTH_CUTOFF',
    'as_symbol',
    'symbols_from_string',
    'symbols_to_string',
]
