"""Configuration management for seqwrangle."""

import os
import re
from pathlib import Path
from typing import Optional, Any

from seqwrangle.core.utils import split_tokens
from seqwrangle.core.rrna import RRNA_TARGETS, ITS_TARGETS
from seqwrangle.models.errors import SeqwrangleError

class ConfigError(SeqwrangleError):
    """Raised when there's an issue with configuration."""
    pass

def _optional_path(value: Optional[str]) -> Optional[Path]:
    return Path(value) if value else None

class SeqwrangleConfig:
    """Centralized configuration for seqwrangle commands."""

    def __init__(self, args: Optional[Any] = None):
        """
        Initialize configuration from args and environment.

        Args:
            args: Arguments from argparse

        Raises:
            ConfigError: If required configuration is missing or inconsistent
        """
        self.command = getattr(args, 'command', None)

        # Common configuration
        self.verbose = getattr(args, 'verbose', False)
        self.quiet = getattr(args, 'quiet', False)
        self.output = getattr(args, 'out', '-') or '-'

        if self.command == 'lineage':
            self.input = getattr(args, 'input', '-') or '-'
            self.taxdump = getattr(args, 'taxdump', None) or os.environ.get("SEQWRANGLE_TAXDUMP")
            if not self.taxdump:
                raise ConfigError("Taxonomy dump directory not specified. Either 'export SEQWRANGLE_TAXDUMP=<path_to_taxdump>' or utilize '--taxdump' parameter.")
            self.taxdump = Path(self.taxdump)
            self.ranks = getattr(args, 'ranks', 'd,p,c,o,f,g,s')
            self.output_mode = getattr(args, 'report', 'name')
            self.missing = getattr(args, 'missing', 'NA')
            self.comment = getattr(args, 'comment', '#')
            self.header = not getattr(args, 'no_header', False)

        elif self.command == 'concat':
            self.alignments = [Path(f) for f in getattr(args, 'alignments', [])]
            self.id_mode = getattr(args, 'id_mode', 'identity')
            self.id_pattern = getattr(args, 'id_pattern', None)
            self.id_replacement = getattr(args, 'id_replacement', '')
            if self.id_mode != 'identity':
                if not self.id_pattern:
                    raise ConfigError(f"--id-pattern is required with --id-mode {self.id_mode}")
                try:
                    re.compile(self.id_pattern)
                except re.error as e:
                    raise ConfigError(f"Invalid --id-pattern '{self.id_pattern}': {str(e)}")
            self.partitions = _optional_path(getattr(args, 'partitions', None))
            self.model = getattr(args, 'model', 'DNA')
            self.gap_char = getattr(args, 'gap_char', '-')
            if len(self.gap_char) != 1:
                raise ConfigError(f"--gap-char must be a single character, got '{self.gap_char}'")

        elif self.command == 'extract-rrna':
            self.fasta = _optional_path(getattr(args, 'fasta', None))
            self.gff = _optional_path(getattr(args, 'gff', None))
            if not self.fasta and not self.gff:
                raise ConfigError("Either --fasta (to run the annotator) or --gff must be given")
            self.kingdom = getattr(args, 'kingdom', 'bac')
            self.threads = getattr(args, 'threads', 1)
            self.barrnap = getattr(args, 'barrnap', None) or os.environ.get("SEQWRANGLE_BARRNAP") or "barrnap"
            self.max_its_length = getattr(args, 'max_its_length', 1500)
            self.min_length = getattr(args, 'min_length', 1)
            if self.max_its_length < 0 or self.min_length < 0:
                raise ConfigError("Region length limits must not be negative")
            self.prefix = getattr(args, 'prefix', None)
            self.strip_suffix = getattr(args, 'strip_suffix', r'\.\d+$')
            try:
                re.compile(self.strip_suffix)
            except re.error as e:
                raise ConfigError(f"Invalid --strip-suffix '{self.strip_suffix}': {str(e)}")
            types = getattr(args, 'types', None)
            self.types = split_tokens(types) if types else None
            unknown = [label for label in (self.types or []) if label not in RRNA_TARGETS + ITS_TARGETS]
            if unknown:
                raise ConfigError(f"Unknown --types label(s) {unknown}, expected any of {RRNA_TARGETS + ITS_TARGETS}")
            self.gff_out = _optional_path(getattr(args, 'gff_out', None))

        elif self.command == 'select-columns':
            self.input = getattr(args, 'input', '-') or '-'
            self.columns = getattr(args, 'columns', '')
            self.codon = getattr(args, 'codon', False)
