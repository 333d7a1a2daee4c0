"""Concatenation of multi-FASTA alignments by identifier."""

import re
import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import List, Dict, Tuple, Optional, Union

from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from seqwrangle.models.errors import AlignmentError, InputError
from seqwrangle.io.parsers import FastaParser

logger = logging.getLogger(__name__)

ID_MODES = ['identity', 'prefix', 'substitute']

class IdMatcher:
    """Base class for turning FASTA record IDs into concatenation keys."""

    def key(self, record_id: str) -> Optional[str]:
        """Return the key for ``record_id``, or None if the ID does not match."""
        raise NotImplementedError

class IdentityMatcher(IdMatcher):
    """Uses record IDs unchanged."""

    def key(self, record_id: str) -> Optional[str]:
        return record_id

class PrefixCaptureMatcher(IdMatcher):
    """Matches a pattern at the start of the ID; the key is group 1, or the whole match."""

    def __init__(self, pattern: str):
        self.pattern = re.compile(pattern)

    def key(self, record_id: str) -> Optional[str]:
        match = self.pattern.match(record_id)
        if not match:
            return None
        return match.group(1) if self.pattern.groups else match.group(0)

class SubstitutionMatcher(IdMatcher):
    """Rewrites the ID with a pattern and replacement; at least one substitution is required."""

    def __init__(self, pattern: str, replacement: str = ''):
        self.pattern = re.compile(pattern)
        self.replacement = replacement

    def key(self, record_id: str) -> Optional[str]:
        key, count = self.pattern.subn(self.replacement, record_id)
        return key if count else None

def create_matcher(mode: str = 'identity', pattern: Optional[str] = None, replacement: str = '') -> IdMatcher:
    """Factory function to create an ID matcher.

    Args:
        mode: One of 'identity', 'prefix' or 'substitute'
        pattern: Regular expression for 'prefix' and 'substitute'
        replacement: Replacement text for 'substitute'

    Returns:
        IdMatcher object

    Raises:
        AlignmentError: If the mode is unknown or lacks a pattern
    """
    if mode == 'identity':
        return IdentityMatcher()
    if mode not in ID_MODES:
        raise AlignmentError(f"Unknown ID mode: {mode}")
    if not pattern:
        raise AlignmentError(f"ID mode '{mode}' requires a pattern")
    try:
        if mode == 'prefix':
            return PrefixCaptureMatcher(pattern)
        return SubstitutionMatcher(pattern, replacement)
    except re.error as e:
        raise AlignmentError(f"Invalid ID pattern '{pattern}': {str(e)}")

@dataclass
class AlignmentBlock:
    """One input alignment, keyed by normalized identifier."""
    name: str
    width: int
    sequences: Dict[str, str]

@dataclass(frozen=True)
class Partition:
    """Column span of one input alignment in the concatenation, 1-based inclusive."""
    name: str
    start: int
    end: int

def build_block(name: str, records: List[SeqRecord], matcher: IdMatcher) -> AlignmentBlock:
    """
    Key the records of one alignment by their normalized identifiers.

    Args:
        name: Name of the source file, for messages and partitions
        records: Aligned records, in file order
        matcher: Identifier normalization strategy

    Returns:
        AlignmentBlock for the file

    Raises:
        InputError: If the alignment has no records
        AlignmentError: If an ID does not match or a key repeats within the file
    """
    if not records:
        raise InputError(f"No sequences found in alignment {name}")

    width = len(records[0].seq)
    sequences: Dict[str, str] = {}
    for record in records:
        key = matcher.key(record.id)
        if key is None:
            raise AlignmentError(f"Identifier '{record.id}' in {name} does not match the ID pattern")
        if key in sequences:
            raise AlignmentError(f"Identifier '{key}' occurs more than once in {name}")
        if len(record.seq) != width:
            logger.warning(
                f"Sequence '{record.id}' in {name} has length {len(record.seq)}, "
                f"alignment width is {width}"
            )
        sequences[key] = str(record.seq)
    logger.debug(f"{name}: {len(sequences)} sequences, width {width}")
    return AlignmentBlock(name, width, sequences)

def check_overlap(blocks: List[AlignmentBlock]) -> None:
    """Raise AlignmentError if no identifier is shared by two or more alignments."""
    if len(blocks) < 2:
        return
    occurrences = Counter(key for block in blocks for key in block.sequences)
    if not any(count > 1 for count in occurrences.values()):
        raise AlignmentError(
            "No identifiers are shared between the input alignments; check the ID pattern"
        )

def concatenate(
    blocks: List[AlignmentBlock],
    gap_char: str = '-'
) -> Tuple[List[SeqRecord], List[Partition]]:
    """
    Concatenate alignments by identifier.

    Every identifier seen in any block appears once, in order of first
    appearance. Blocks lacking an identifier contribute a gap-filled segment
    of that block's width.

    Args:
        blocks: Input alignments, in output order
        gap_char: Character used for missing segments

    Returns:
        Concatenated records and the column span of each block

    Raises:
        AlignmentError: If the blocks share no identifiers
    """
    check_overlap(blocks)

    keys: Dict[str, None] = {}
    for block in blocks:
        for key in block.sequences:
            keys.setdefault(key, None)

    records = []
    for key in keys:
        segments = [block.sequences.get(key, gap_char * block.width) for block in blocks]
        records.append(SeqRecord(Seq(''.join(segments)), id=key, description=''))

    partitions = []
    offset = 0
    for block in blocks:
        partitions.append(Partition(block.name, offset + 1, offset + block.width))
        offset += block.width

    missing = sum(1 for block in blocks for key in keys if key not in block.sequences)
    logger.info(
        f"Concatenated {len(blocks)} alignments into {len(records)} sequences "
        f"of width {offset} ({missing} gap-filled segments)"
    )
    return records, partitions

def concatenate_files(
    paths: List[Union[str, Path]],
    matcher: IdMatcher,
    gap_char: str = '-'
) -> Tuple[List[SeqRecord], List[Partition]]:
    """Read alignment files and concatenate them, see :func:`concatenate`."""
    parser = FastaParser()
    blocks = [build_block(Path(path).name, parser.parse(path), matcher) for path in paths]
    return concatenate(blocks, gap_char)
