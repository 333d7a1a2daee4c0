"""File writers for seqwrangle."""

import sys
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import List, Dict, Iterable, Iterator, Union, TextIO

from Bio import SeqIO
from Bio.SeqRecord import SeqRecord

from seqwrangle.models.errors import InputError
from seqwrangle.models.features import FeatureInterval
from seqwrangle.core.concat import Partition

logger = logging.getLogger(__name__)

@contextmanager
def open_output(path: Union[str, Path]) -> Iterator[TextIO]:
    """Open a text output, writing to stdout for '-'.

    Raises:
        InputError: If the file cannot be created
    """
    if str(path) == '-':
        yield sys.stdout
        sys.stdout.flush()
        return
    try:
        handle = open(path, "w", encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot open output file {path}: {str(e)}")
    with handle:
        yield handle

def write_fasta(records: Iterable[SeqRecord], path: Union[str, Path]) -> int:
    """
    Write records as FASTA.

    Args:
        records: Records to write; consumed lazily
        path: Output path or '-' for stdout

    Returns:
        Number of records written
    """
    with open_output(path) as handle:
        count = SeqIO.write(records, handle, "fasta")
    logger.info(f"Wrote {count} sequences to {'stdout' if str(path) == '-' else path}")
    return count

def write_partitions(partitions: List[Partition], path: Union[str, Path], model: str = "DNA") -> None:
    """
    Write a RAxML-style partition file, one '<model>, <name>=<start>-<end>' line per alignment.

    Args:
        partitions: Column spans, 1-based inclusive
        path: Output path
        model: Substitution model name written on each line
    """
    with open_output(path) as handle:
        for partition in partitions:
            handle.write(f"{model}, {partition.name}={partition.start}-{partition.end}\n")
    logger.info(f"Partition file generated: {path}")

def write_gff(features_by_contig: Dict[str, List[FeatureInterval]], path: Union[str, Path]) -> None:
    """
    Write features as GFF3, converting back to 1-based closed coordinates.

    Assigned IDs are prepended to the attribute column.
    """
    count = 0
    with open_output(path) as handle:
        handle.write("##gff-version 3\n")
        for contig, features in features_by_contig.items():
            for feature in features:
                attributes = feature.attributes
                if feature.feature_id:
                    attributes = f"ID={feature.feature_id};{attributes}" if attributes else f"ID={feature.feature_id}"
                handle.write('\t'.join([
                    contig,
                    feature.source,
                    feature.type,
                    str(feature.start + 1),
                    str(feature.end),
                    feature.score,
                    feature.strand,
                    '.',
                    attributes,
                ]) + '\n')
                count += 1
    logger.info(f"Wrote {count} features to {path}")
