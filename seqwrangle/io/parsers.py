"""File format parsers for seqwrangle."""

import gzip
import sys
import logging
from contextlib import contextmanager
from io import StringIO
from pathlib import Path
from typing import List, Dict, Tuple, Iterator, Iterable, Union, TextIO
from abc import ABC, abstractmethod

from Bio import SeqIO
from Bio.SeqRecord import SeqRecord

from seqwrangle.models.errors import InputError, AnnotationError
from seqwrangle.models.features import FeatureInterval
from seqwrangle.core.rrna import target_from_attributes

logger = logging.getLogger(__name__)

@contextmanager
def open_text(path: Union[str, Path]) -> Iterator[TextIO]:
    """Open a text input, reading stdin for '-' and decompressing '.gz' files.

    Raises:
        InputError: If the file cannot be opened
    """
    if str(path) == '-':
        yield sys.stdin
        return
    try:
        if str(path).endswith(".gz"):
            handle = gzip.open(path, "rt", encoding="utf-8")
        else:
            handle = open(path, "r", encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot open input file {path}: {str(e)}")
    with handle:
        yield handle

class Parser(ABC):
    """Base parser class for different file formats."""

    @abstractmethod
    def parse(self, path: Path):
        """Parse file at the given path.

        Args:
            path: Path to file

        Returns:
            Parsed data
        """
        pass

class FastaParser(Parser):
    """Parser for FASTA files."""

    def parse(self, path: Union[str, Path]) -> List[SeqRecord]:
        """Parse a FASTA file into a list of records, keeping file order.

        Raises:
            InputError: If the file is missing or not valid FASTA
        """
        with open_text(path) as handle:
            try:
                return list(SeqIO.parse(handle, "fasta"))
            except ValueError as e:
                raise InputError(f"Error parsing FASTA file {path}: {str(e)}")

class GffParser(Parser):
    """Parser for GFF3 rRNA annotations, with an optional ##FASTA section."""

    def parse(self, path: Union[str, Path]) -> Tuple[Dict[str, List[FeatureInterval]], Dict[str, SeqRecord]]:
        """Parse a GFF3 file.

        Args:
            path: Path to the GFF3 file

        Returns:
            Features grouped by contig, and any inline sequences keyed by ID

        Raises:
            AnnotationError: If a feature line is malformed
        """
        with open_text(path) as handle:
            return parse_gff_lines(handle)

def parse_gff_lines(
    lines: Iterable[str]
) -> Tuple[Dict[str, List[FeatureInterval]], Dict[str, SeqRecord]]:
    """
    Parse GFF3 lines into rRNA feature intervals grouped by contig.

    Coordinates are converted from 1-based closed to 0-based half-open.
    Features whose attributes carry no recognizable rRNA subunit are skipped.
    Lines after a '##FASTA' directive are read as FASTA.

    Args:
        lines: GFF3 text lines

    Returns:
        Features grouped by contig (sorted by start), and inline sequences

    Raises:
        AnnotationError: If a feature line is malformed
    """
    features: Dict[str, List[FeatureInterval]] = {}
    fasta_lines: List[str] = []
    in_fasta = False
    skipped = 0

    for line_number, line in enumerate(lines, 1):
        if in_fasta:
            fasta_lines.append(line.rstrip('\r\n'))
            continue
        line = line.rstrip('\r\n')
        if line.startswith('##FASTA'):
            in_fasta = True
            continue
        if not line.strip() or line.startswith('#'):
            continue

        fields = line.split('\t')
        if len(fields) != 9:
            raise AnnotationError(f"GFF line {line_number} has {len(fields)} columns, expected 9")
        seqid, source, feature_type, start, end, score, strand, _, attributes = fields
        try:
            start_0, end_0 = int(start) - 1, int(end)
        except ValueError:
            raise AnnotationError(f"GFF line {line_number} has non-integer coordinates: {start}, {end}")
        if start_0 < 0 or end_0 < start_0:
            raise AnnotationError(f"GFF line {line_number} has invalid coordinates: {start}-{end}")

        target = target_from_attributes(attributes)
        if target is None:
            logger.debug(f"Skipping GFF line {line_number}: no rRNA subunit in '{attributes}'")
            skipped += 1
            continue

        features.setdefault(seqid, []).append(FeatureInterval(
            seqid=seqid,
            start=start_0,
            end=end_0,
            strand=strand,
            target=target,
            type=feature_type,
            source=source,
            score=score,
            attributes=attributes
        ))

    for contig_features in features.values():
        contig_features.sort(key=lambda feature: feature.start)

    sequences = {}
    if fasta_lines:
        sequences = SeqIO.to_dict(SeqIO.parse(StringIO('\n'.join(fasta_lines)), "fasta"))

    logger.info(f"Read {sum(len(v) for v in features.values())} rRNA features on {len(features)} contigs")
    if skipped:
        logger.debug(f"Skipped {skipped} GFF features without an rRNA subunit")
    return features, sequences
