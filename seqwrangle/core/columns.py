"""Column selection from multiple sequence alignments."""

import logging
from typing import List, Iterable, Iterator

import numpy as np
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from seqwrangle.models.errors import SelectionError
from seqwrangle.core.utils import split_tokens

logger = logging.getLogger(__name__)

def parse_columns(columns: str) -> List[int]:
    """
    Parse a column list such as '0,2,10-12' into 0-based indices.

    Order and repeats are kept as given; ranges are inclusive.

    Args:
        columns: Comma-separated indices and 'a-b' ranges

    Returns:
        List of column indices

    Raises:
        SelectionError: If a token is not a non-negative integer or range
    """
    indices = []
    for token in split_tokens(columns):
        first, sep, last = token.partition('-')
        try:
            start = int(first)
            stop = int(last) if sep else start
        except ValueError:
            raise SelectionError(f"Invalid column '{token}': expected an index or an 'a-b' range")
        if start < 0 or stop < 0:
            raise SelectionError(f"Invalid column '{token}': indices must not be negative")
        step = 1 if stop >= start else -1
        indices.extend(range(start, stop + step, step))
    if not indices:
        raise SelectionError("No columns selected")
    return indices

def expand_codons(indices: List[int]) -> List[int]:
    """Expand codon indices to the three symbol positions of each codon."""
    return [3 * index + offset for index in indices for offset in range(3)]

def column_positions(columns: str, codon: bool = False) -> np.ndarray:
    """Parse ``columns`` and return the symbol positions to gather."""
    indices = parse_columns(columns)
    if codon:
        indices = expand_codons(indices)
    return np.array(indices, dtype=np.int64)

def select_columns(records: Iterable[SeqRecord], positions: np.ndarray) -> Iterator[SeqRecord]:
    """
    Restrict each record to the given positions, in the given order.

    Args:
        records: Aligned records
        positions: Symbol positions to keep

    Yields:
        Records with the selected columns; IDs and descriptions are kept

    Raises:
        SelectionError: If a position lies beyond a record's sequence
    """
    highest = int(positions.max())
    count = 0
    for record in records:
        symbols = np.array(list(str(record.seq)), dtype='<U1')
        if highest >= len(symbols):
            raise SelectionError(
                f"Column {highest} is out of range for '{record.id}' of length {len(symbols)}"
            )
        count += 1
        yield SeqRecord(
            Seq(''.join(symbols[positions])),
            id=record.id,
            name=record.name,
            description=record.description
        )
    logger.info(f"Selected {len(positions)} columns from {count} sequences")
