"""Data models for taxonomy."""

from typing import List, Dict, Optional
from dataclasses import dataclass

@dataclass(frozen=True)
class TaxonNode:
    """A single node of a taxonomy lineage."""
    tax_id: str
    name: str
    rank: str

@dataclass
class TaxonomicLineage:
    """Represents the lineage of a taxon, ordered from the taxon up to the root."""
    tax_id: str
    nodes: List[TaxonNode]

    def by_rank(self) -> Dict[str, TaxonNode]:
        """Map rank labels to nodes, keeping the lowest node for repeated ranks."""
        ranks = {}
        for node in self.nodes:
            ranks.setdefault(node.rank, node)
        return ranks

    def project(
        self,
        ranks: List[str],
        output: str = "name",
        missing: str = "NA"
    ) -> List[str]:
        """Project the lineage onto an ordered list of ranks.

        Args:
            ranks: Target ranks, in output order
            output: 'name', 'id' or 'both'
            missing: Sentinel for ranks absent from the lineage

        Returns:
            One value per rank ('both' yields two values per rank: id, name)
        """
        ranks_dict = self.by_rank()
        values = []
        for rank in ranks:
            node: Optional[TaxonNode] = ranks_dict.get(rank)
            if output in ("id", "both"):
                values.append(node.tax_id if node else missing)
            if output in ("name", "both"):
                values.append(node.name if node else missing)
        return values

def missing_values(ranks: List[str], output: str = "name", missing: str = "NA") -> List[str]:
    """Return the all-sentinel projection for a row with no usable taxon."""
    width = 2 if output == "both" else 1
    return [missing] * (len(ranks) * width)
