"""Data models for genomic feature intervals."""

from typing import Optional
from dataclasses import dataclass, replace

@dataclass
class FeatureInterval:
    """An annotated region on a contig.

    Coordinates are 0-based and half-open: ``start`` is the first base and
    ``end`` is one past the last base.
    """
    seqid: str
    start: int
    end: int
    strand: str
    target: str
    type: str = "rRNA"
    source: str = "."
    score: str = "."
    attributes: str = ""
    feature_id: Optional[str] = None

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def is_its(self) -> bool:
        return self.type == "ITS"

    def with_id(self, feature_id: str) -> 'FeatureInterval':
        """Return a copy carrying the assigned output ID."""
        return replace(self, feature_id=feature_id)

    def location(self) -> str:
        """Format the location as 1-based closed coordinates, e.g. 'ctg1:101-1600(+)'."""
        return f"{self.seqid}:{self.start + 1}-{self.end}({self.strand})"
