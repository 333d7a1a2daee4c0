"""rRNA subunit labelling, ITS synthesis and region extraction."""

import re
import logging
from collections import Counter
from dataclasses import dataclass
from typing import List, Dict, Optional, Iterable, Iterator, Collection

from Bio.SeqRecord import SeqRecord

from seqwrangle.models.features import FeatureInterval

logger = logging.getLogger(__name__)

# Subunit labels as they appear in output IDs
RRNA_TARGETS = ['5S', '5_8S', '12S', '16S', '18S', '23S', '28S']
TARGET_PATTERN = re.compile(r'(?<![\d.])(5[._]8|5|12|16|18|23|28)S(?![a-z])', re.IGNORECASE)

DOWNSTREAM = 1
UPSTREAM = -1

@dataclass(frozen=True)
class PairingRule:
    """An anchor subunit and the partner expected next to it on the same operon."""
    anchor: str
    partner: str
    direction: int
    name: str

ITS_RULES = [
    PairingRule('16S', '23S', DOWNSTREAM, '16S-23S-ITS'),
    PairingRule('5_8S', '18S', UPSTREAM, '18S-5_8S-ITS1'),
    PairingRule('5_8S', '28S', DOWNSTREAM, '5_8S-28S-ITS2'),
]
ITS_TARGETS = [rule.name for rule in ITS_RULES]

def target_from_attributes(attributes: str) -> Optional[str]:
    """
    Derive the rRNA subunit label from a GFF attribute column.

    Args:
        attributes: Attribute text, e.g. 'Name=16S_rRNA;product=16S ribosomal RNA'

    Returns:
        Label such as '16S' or '5_8S', or None if no subunit is named
    """
    match = TARGET_PATTERN.search(attributes)
    if not match:
        return None
    return match.group(1).replace('.', '_') + 'S'

def neighbor_index(index: int, strand: str, direction: int) -> int:
    """Index of the adjacent feature in ``direction`` relative to the feature's strand."""
    step = 1 if strand == '+' else -1
    return index + step * direction

def find_its(features: List[FeatureInterval], max_its_length: int) -> List[FeatureInterval]:
    """
    Synthesize ITS intervals between adjacent rRNA subunits on one contig.

    For each anchor subunit, the neighbouring feature in list order on the
    side given by the rule and the anchor's strand is considered. The pairing
    is accepted when the neighbour is the expected partner, or when the
    neighbour lies on the opposite strand, and the gap between the two is
    positive and no longer than ``max_its_length``.

    Args:
        features: Features of a single contig, sorted by start
        max_its_length: Maximum allowed gap between the two subunits

    Returns:
        The synthesized ITS intervals (not yet merged into ``features``)
    """
    its_features = []
    for index, anchor in enumerate(features):
        for rule in ITS_RULES:
            if anchor.target != rule.anchor:
                continue
            other = neighbor_index(index, anchor.strand, rule.direction)
            if other < 0 or other >= len(features):
                continue
            neighbor = features[other]

            if neighbor.target == rule.partner:
                pass
            elif neighbor.strand != anchor.strand:
                # Opposite-strand neighbours are accepted regardless of their label
                logger.debug(
                    f"Pairing {anchor.target} at {anchor.location()} with opposite-strand "
                    f"{neighbor.target} at {neighbor.location()}"
                )
            else:
                continue

            lower, upper = sorted((anchor, neighbor), key=lambda feature: feature.start)
            gap = upper.start - lower.end
            if gap <= 0 or gap > max_its_length:
                logger.debug(f"No {rule.name} for {anchor.location()}: gap of {gap} bp")
                continue

            its_features.append(FeatureInterval(
                seqid=anchor.seqid,
                start=lower.end,
                end=upper.start,
                strand=anchor.strand,
                target=rule.name,
                type='ITS',
                source='seqwrangle',
                attributes=f"Name={rule.name};note=between {lower.target} and {upper.target}"
            ))
    return its_features

def add_its(
    features_by_contig: Dict[str, List[FeatureInterval]],
    max_its_length: int
) -> Dict[str, List[FeatureInterval]]:
    """Merge synthesized ITS intervals into each contig's features, sorted by start."""
    merged = {}
    its_total = 0
    for contig in sorted(features_by_contig):
        features = sorted(features_by_contig[contig], key=lambda feature: feature.start)
        its_features = find_its(features, max_its_length)
        its_total += len(its_features)
        merged[contig] = sorted(features + its_features, key=lambda feature: feature.start)
    logger.info(f"Synthesized {its_total} ITS regions on {len(merged)} contigs")
    return merged

class RegionNamer:
    """Assigns '<prefix>_<label>_<n>' IDs, counting each prefix and label pair from 1."""

    def __init__(self, prefix: Optional[str] = None, strip_suffix: Optional[str] = r'\.\d+$'):
        self.prefix = prefix
        self._strip = re.compile(strip_suffix) if strip_suffix else None
        self._counts: Counter = Counter()

    def contig_prefix(self, seqid: str) -> str:
        if self.prefix:
            return self.prefix
        if self._strip:
            return self._strip.sub('', seqid)
        return seqid

    def name(self, feature: FeatureInterval) -> str:
        prefix = self.contig_prefix(feature.seqid)
        self._counts[(prefix, feature.target)] += 1
        return f"{prefix}_{feature.target}_{self._counts[(prefix, feature.target)]}"

def assign_ids(
    features_by_contig: Dict[str, List[FeatureInterval]],
    namer: RegionNamer
) -> Dict[str, List[FeatureInterval]]:
    """Return a copy of the feature table with output IDs assigned in contig order."""
    return {
        contig: [feature.with_id(namer.name(feature)) for feature in features]
        for contig, features in features_by_contig.items()
    }

def extract_regions(
    records: Iterable[SeqRecord],
    features_by_contig: Dict[str, List[FeatureInterval]],
    source_name: str,
    annotation_name: str,
    types: Optional[Collection[str]] = None,
    min_length: int = 1
) -> Iterator[SeqRecord]:
    """
    Cut every annotated region out of its contig sequence.

    Minus-strand regions are reverse-complemented. Contigs without features
    produce nothing.

    Args:
        records: Contig sequences
        features_by_contig: Features with assigned IDs, grouped by contig
        source_name: Name of the sequence file, reported in headers
        annotation_name: Name of the annotation source, reported in headers
        types: Labels to emit (all if None)
        min_length: Regions shorter than this are dropped

    Yields:
        One record per emitted region
    """
    for record in records:
        features = features_by_contig.get(record.id)
        if not features:
            logger.debug(f"No rRNA features on {record.id}; skipping")
            continue
        for feature in features:
            if types is not None and feature.target not in types:
                continue
            if len(feature) < min_length:
                logger.debug(f"Dropping {feature.feature_id}: {len(feature)} bp is below minimum length")
                continue
            if feature.end > len(record.seq):
                logger.warning(
                    f"Feature {feature.feature_id} at {feature.location()} extends past the end "
                    f"of {record.id} ({len(record.seq)} bp); skipping"
                )
                continue
            region = record.seq[feature.start:feature.end]
            if feature.strand == '-':
                region = region.reverse_complement()
            yield SeqRecord(
                region,
                id=feature.feature_id,
                description=f"{feature.location()} source={source_name} annotation={annotation_name}"
            )
