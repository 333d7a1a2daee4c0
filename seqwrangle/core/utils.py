"""Utility functions for seqwrangle."""

import logging
from typing import List, Dict

# Logger configuration
logger = logging.getLogger(__name__)

# Static global variables
# Taxonomic ranks from the most general to the most specific
RANK_LADDER = [
    'superkingdom', 'kingdom', 'subkingdom',
    'superphylum', 'phylum', 'subphylum',
    'superclass', 'class', 'subclass', 'infraclass',
    'superorder', 'order', 'suborder', 'infraorder',
    'superfamily', 'family', 'subfamily', 'tribe', 'subtribe',
    'genus', 'subgenus',
    'species group', 'species subgroup', 'species', 'subspecies',
]
RANK_ABBREVIATIONS: Dict[str, str] = {
    's': 'species',
    'g': 'genus',
    'f': 'family',
    'o': 'order',
    'c': 'class',
    'p': 'phylum',
    'k': 'kingdom',
    'd': 'superkingdom',
}
# Rank labels used by newer NCBI dumps for ladder ranks
RANK_ALIASES: Dict[str, str] = {
    'domain': 'superkingdom',
    'realm': 'superkingdom',
}
DEFAULT_RANKS = 'd,p,c,o,f,g,s'
# Taxon keys that never resolve to a lineage: unassigned and root
NULL_TAXIDS = {'', '0', '1'}

def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """
    Configure logging for seqwrangle.

    Args:
        verbose: Whether to enable verbose (DEBUG) logging
        quiet: Whether to restrict logging to warnings and errors

    Returns:
        Logger instance
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    return logging.getLogger('seqwrangle')

def split_tokens(value: str, sep: str = ',') -> List[str]:
    """Split a delimited option value, dropping blanks around tokens."""
    return [token.strip() for token in value.split(sep) if token.strip()]
