"""Taxonomy-related functionality."""

import logging
from pathlib import Path
from typing import List, Dict, Tuple, Optional, TextIO, Iterable

from seqwrangle.models.errors import TaxonomyError
from seqwrangle.models.taxonomic import TaxonNode, TaxonomicLineage, missing_values
from seqwrangle.core.database import create_names_dict, create_nodes_dict, create_merged_dict
from seqwrangle.core.utils import RANK_LADDER, RANK_ABBREVIATIONS, NULL_TAXIDS, split_tokens

logger = logging.getLogger(__name__)

class TaxonomyDB:
    """Lookup service over an NCBI taxonomy tree.

    Built once per run and handed to the resolver, so tests can supply small
    in-memory trees.
    """

    def __init__(
        self,
        nodes_dict: Dict[str, Tuple[str, str]],
        names_dict: Dict[str, str],
        merged_dict: Optional[Dict[str, str]] = None
    ):
        self.nodes = nodes_dict
        self.names = names_dict
        self.merged = merged_dict or {}
        self._name_index: Optional[Dict[str, str]] = None

    @classmethod
    def from_taxdump(cls, taxdump_dir: Path) -> 'TaxonomyDB':
        """Load nodes.dmp, names.dmp and (if present) merged.dmp from a taxdump directory.

        Raises:
            TaxonomyError: If the directory lacks the required dump files
        """
        taxdump_dir = Path(taxdump_dir)
        for required in ('nodes.dmp', 'names.dmp'):
            if not (taxdump_dir / required).exists():
                raise TaxonomyError(f"{required} not found in taxonomy directory: {taxdump_dir}")

        logger.info(f"Loading taxonomy from {taxdump_dir}")
        nodes_dict = create_nodes_dict(taxdump_dir / 'nodes.dmp')
        names_dict = create_names_dict(taxdump_dir / 'names.dmp')
        merged_path = taxdump_dir / 'merged.dmp'
        merged_dict = create_merged_dict(merged_path) if merged_path.exists() else {}
        logger.info(f"Loaded {len(nodes_dict)} taxonomy nodes")
        return cls(nodes_dict, names_dict, merged_dict)

    def resolve_taxid(self, taxid: str) -> Optional[str]:
        """Return the current taxid for ``taxid``, following merges, or None if unknown."""
        taxid = self.merged.get(taxid, taxid)
        return taxid if taxid in self.nodes else None

    def translate_name(self, name: str) -> Optional[str]:
        """Translate a scientific name to its taxid, or None if the name is unknown."""
        if self._name_index is None:
            self._name_index = {}
            for tax_id, sci_name in self.names.items():
                self._name_index.setdefault(sci_name, tax_id)
        return self._name_index.get(name)

    def lineage(self, taxid: str) -> TaxonomicLineage:
        """
        Traverse the nodes from ``taxid`` up to the root.

        Args:
            taxid: Tax ID, already resolved against merged IDs

        Returns:
            Lineage ordered from the taxon to the root (root excluded)

        Raises:
            TaxonomyError: If a node on the path is missing from the tree
        """
        nodes = []
        current_taxid = taxid
        seen = set()
        try:
            while current_taxid not in seen:
                seen.add(current_taxid)
                parent_taxid, rank = self.nodes[current_taxid]
                if current_taxid == parent_taxid:
                    break
                nodes.append(TaxonNode(current_taxid, self.names.get(current_taxid, ''), rank))
                current_taxid = parent_taxid
        except KeyError as e:
            raise TaxonomyError(f"Taxonomy ID {taxid} has a broken lineage at node {str(e)}")
        return TaxonomicLineage(taxid, nodes)

def _rank_from_token(token: str) -> str:
    rank = RANK_ABBREVIATIONS.get(token, token)
    if rank not in RANK_LADDER:
        raise TaxonomyError(
            f"Unrecognized rank '{token}'. Use one of {sorted(RANK_ABBREVIATIONS)} or {RANK_LADDER}"
        )
    return rank

def parse_ranks(ranks: str) -> List[str]:
    """
    Expand a rank selection such as 'd,p,c' or 'o-k,g,s' into rank names.

    Ranges run inclusively along the rank ladder from the first rank to the
    second, in whichever direction that is.

    Args:
        ranks: Comma-separated rank tokens

    Returns:
        Ordered list of rank names

    Raises:
        TaxonomyError: If a token is not a known rank or abbreviation
    """
    expanded = []
    for token in split_tokens(ranks):
        if '-' in token:
            first, _, last = token.partition('-')
            start = RANK_LADDER.index(_rank_from_token(first.strip()))
            stop = RANK_LADDER.index(_rank_from_token(last.strip()))
            if start <= stop:
                expanded.extend(RANK_LADDER[start:stop + 1])
            else:
                expanded.extend(reversed(RANK_LADDER[stop:start + 1]))
        else:
            expanded.append(_rank_from_token(token))
    if not expanded:
        raise TaxonomyError("No ranks requested")
    return expanded

class LineageResolver:
    """Projects taxon keys (IDs or names) onto a fixed list of ranks."""

    def __init__(
        self,
        taxonomy: TaxonomyDB,
        ranks: List[str],
        output: str = "name",
        missing: str = "NA"
    ):
        if output not in ("name", "id", "both"):
            raise TaxonomyError(f"Unknown output mode: {output}")
        self.taxonomy = taxonomy
        self.ranks = ranks
        self.output = output
        self.missing = missing

    def header(self) -> List[str]:
        """Column names for the values returned by :meth:`resolve`."""
        columns = []
        for rank in self.ranks:
            label = rank.replace(' ', '_')
            if self.output in ("id", "both"):
                columns.append(f"{label}_taxid")
            if self.output in ("name", "both"):
                columns.append(label)
        return columns

    def resolve(self, key: str) -> List[str]:
        """
        Resolve a taxon key to one value per requested rank.

        Args:
            key: Tax ID or scientific name

        Returns:
            Values for each rank, using the sentinel where the rank is absent
        """
        key = key.strip()
        if key in NULL_TAXIDS:
            return missing_values(self.ranks, self.output, self.missing)

        if key.isdigit():
            taxid = self.taxonomy.resolve_taxid(key)
            if taxid is None:
                logger.warning(f"Taxonomy ID {key} not found in taxonomy; reporting as missing")
                return missing_values(self.ranks, self.output, self.missing)
        else:
            taxid = self.taxonomy.translate_name(key)
            if taxid is None:
                logger.warning(f"Could not translate taxon name '{key}'; reporting as missing")
                return missing_values(self.ranks, self.output, self.missing)
            logger.debug(f"Translated '{key}' to taxid {taxid}")

        if taxid in NULL_TAXIDS:
            return missing_values(self.ranks, self.output, self.missing)
        return self.taxonomy.lineage(taxid).project(self.ranks, self.output, self.missing)

def annotate_table(
    lines: Iterable[str],
    out_handle: TextIO,
    resolver: LineageResolver,
    header: bool = True,
    comment: str = '#'
) -> int:
    """
    Append lineage columns to each row of a tab-separated table.

    The last column of each row is the taxon key. Comment lines pass through
    unchanged; the first other line is treated as the header when ``header``
    is set.

    Args:
        lines: Input lines, newline-terminated or not
        out_handle: Writable text handle
        resolver: Configured lineage resolver
        header: Whether the first non-comment line is a header
        comment: Prefix marking comment lines

    Returns:
        Number of data rows written
    """
    rows = 0
    pending_header = header
    for line in lines:
        line = line.rstrip('\r\n')
        if comment and line.startswith(comment):
            out_handle.write(line + '\n')
            continue
        if pending_header:
            out_handle.write('\t'.join([line] + resolver.header()) + '\n')
            pending_header = False
            continue
        key = line.split('\t')[-1]
        out_handle.write('\t'.join([line] + resolver.resolve(key)) + '\n')
        rows += 1
    logger.info(f"Resolved lineages for {rows} rows")
    return rows
