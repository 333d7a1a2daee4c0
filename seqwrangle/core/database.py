"""Loaders for NCBI taxonomy dump files."""

import csv
import logging
from pathlib import Path
from typing import Dict, Tuple

import pandas as pd

from seqwrangle.models.errors import TaxonomyError
from seqwrangle.core.utils import RANK_ALIASES

logger = logging.getLogger(__name__)

def _read_dmp(path: Path, columns: int) -> pd.DataFrame:
    """Read the first ``columns`` fields of a '\\t|\\t' delimited dump file."""
    dmp_df = pd.read_csv(
        path,
        sep='|',
        header=None,
        index_col=False,
        dtype=str,
        keep_default_na=False,
        quoting=csv.QUOTE_NONE
    )[list(range(columns))]
    for col in dmp_df.columns:
        dmp_df[col] = dmp_df[col].str.strip()
    return dmp_df

def create_names_dict(names_path: Path) -> Dict[str, str]:
    """
    Convert names.dmp file into a dictionary.

    Args:
        names_path: Path to names.dmp file

    Returns:
        Dictionary of names.dmp with 'tax_id' as keys, scientific 'name_txt' as values

    Raises:
        TaxonomyError: If there's an issue with loading names.dmp
    """
    try:
        names_df = _read_dmp(names_path, 4).drop([2], axis=1)
        names_df.columns = ['tax_id', 'name_txt', 'name_class']
        names_df = names_df[names_df["name_class"] == "scientific name"]
        return dict(zip(names_df['tax_id'], names_df['name_txt']))
    except Exception as e:
        raise TaxonomyError(f"Error loading names.dmp file: {str(e)}")

def create_nodes_dict(nodes_path: Path) -> Dict[str, Tuple[str, str]]:
    """
    Convert nodes.dmp file into a dictionary.

    Args:
        nodes_path: Path to nodes.dmp file

    Returns:
        Dictionary of nodes.dmp with 'tax_id' as keys, tuple ('parent_taxid', 'rank') as values

    Raises:
        TaxonomyError: If there's an issue with loading nodes.dmp
    """
    try:
        nodes_df = _read_dmp(nodes_path, 3)
        nodes_df.columns = ['tax_id', 'parent_tax_id', 'rank']
        nodes_df['rank'] = nodes_df['rank'].replace(RANK_ALIASES)
        return dict(zip(nodes_df['tax_id'], tuple(zip(nodes_df['parent_tax_id'], nodes_df['rank']))))
    except Exception as e:
        raise TaxonomyError(f"Error loading nodes.dmp file: {str(e)}")

def create_merged_dict(merged_path: Path) -> Dict[str, str]:
    """
    Convert merged.dmp file into a dictionary mapping retired taxids to current ones.

    Args:
        merged_path: Path to merged.dmp file

    Returns:
        Dictionary with 'old_tax_id' as keys, 'new_tax_id' as values

    Raises:
        TaxonomyError: If there's an issue with loading merged.dmp
    """
    try:
        merged_df = _read_dmp(merged_path, 2)
        return dict(zip(merged_df[0], merged_df[1]))
    except Exception as e:
        raise TaxonomyError(f"Error loading merged.dmp file: {str(e)}")
