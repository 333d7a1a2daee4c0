#!/usr/bin/env python3
"""Command-line interface for seqwrangle."""

import sys
import argparse
import logging

from seqwrangle import __version__
from seqwrangle.core.utils import setup_logging, DEFAULT_RANKS
from seqwrangle.models.config import SeqwrangleConfig
from seqwrangle.models.errors import SeqwrangleError

logger = logging.getLogger(__name__)

def create_parser() -> argparse.ArgumentParser:
    """
    Create and return the main argument parser for seqwrangle.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="seqwrangle: taxonomy, alignment and rRNA wrangling utilities",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        '--version', '-v',
        action='version',
        version=f'%(prog)s v{__version__}'
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose (debug) logging'
    )
    verbosity.add_argument(
        '--quiet',
        action='store_true',
        help='Only log warnings and errors'
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help='seqwrangle commands',
        required=True
    )

    # Lineage command
    lineage_parser = subparsers.add_parser(
        "lineage",
        help="Append taxonomic lineage columns to a table of taxon IDs or names",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    lineage_parser.add_argument(
        'input',
        type=str,
        nargs='?',
        default='-',
        help='tab-separated table whose last column is a taxid or name (- for stdin)'
    )
    lineage_parser.add_argument(
        '--taxdump',
        type=str,
        default=None,
        help='directory with NCBI nodes.dmp and names.dmp (or set SEQWRANGLE_TAXDUMP)'
    )
    lineage_parser.add_argument(
        '--ranks', '-r',
        type=str,
        default=DEFAULT_RANKS,
        help='comma-separated ranks, abbreviations (s,g,f,o,c,p,k,d) or ranges such as o-k'
    )
    lineage_parser.add_argument(
        '--report',
        choices=['name', 'id', 'both'],
        default='name',
        help='report scientific names, taxids or both for each rank'
    )
    lineage_parser.add_argument(
        '--missing',
        type=str,
        default='NA',
        help='value for ranks absent from a lineage'
    )
    lineage_parser.add_argument(
        '--comment',
        type=str,
        default='#',
        help='prefix of lines passed through unchanged'
    )
    lineage_parser.add_argument(
        '--no-header',
        action='store_true',
        help='input has no header line'
    )
    lineage_parser.add_argument(
        '--out', '-o',
        type=str,
        default='-',
        help='output path (- for stdout)'
    )

    # Concat command
    concat_parser = subparsers.add_parser(
        "concat",
        help="Concatenate FASTA alignments by sequence identifier",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    concat_parser.add_argument(
        'alignments',
        type=str,
        nargs='+',
        help='aligned FASTA files, concatenated in the given order'
    )
    concat_parser.add_argument(
        '--id-mode',
        choices=['identity', 'prefix', 'substitute'],
        default='identity',
        help='how record IDs are turned into concatenation keys'
    )
    concat_parser.add_argument(
        '--id-pattern',
        type=str,
        default=None,
        help='regular expression for prefix capture or substitution'
    )
    concat_parser.add_argument(
        '--id-replacement',
        type=str,
        default='',
        help='replacement text for --id-mode substitute'
    )
    concat_parser.add_argument(
        '--partitions', '-p',
        type=str,
        default=None,
        help='write a RAxML-style partition file to this path'
    )
    concat_parser.add_argument(
        '--model',
        type=str,
        default='DNA',
        help='model name written in the partition file'
    )
    concat_parser.add_argument(
        '--gap-char',
        type=str,
        default='-',
        help='character filling segments for missing identifiers'
    )
    concat_parser.add_argument(
        '--out', '-o',
        type=str,
        default='-',
        help='output path (- for stdout)'
    )

    # Extract-rrna command
    rrna_parser = subparsers.add_parser(
        "extract-rrna",
        help="Extract rRNA genes and the ITS regions between them",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    rrna_parser.add_argument(
        '--fasta', '-f',
        type=str,
        default=None,
        help='contig FASTA; annotated with barrnap unless --gff is given'
    )
    rrna_parser.add_argument(
        '--gff', '-g',
        type=str,
        default=None,
        help='precomputed rRNA GFF3, optionally with a ##FASTA section'
    )
    rrna_parser.add_argument(
        '--kingdom', '-k',
        choices=['bac', 'arc', 'euk', 'mito'],
        default='bac',
        help='barrnap kingdom'
    )
    rrna_parser.add_argument(
        '--threads',
        type=int,
        default=1,
        help='threads utilized by barrnap'
    )
    rrna_parser.add_argument(
        '--barrnap',
        type=str,
        default=None,
        help='barrnap executable (or set SEQWRANGLE_BARRNAP)'
    )
    rrna_parser.add_argument(
        '--max-its-length',
        type=int,
        default=1500,
        help='maximum gap between paired subunits for an ITS'
    )
    rrna_parser.add_argument(
        '--min-length',
        type=int,
        default=1,
        help='minimum length of an emitted region'
    )
    rrna_parser.add_argument(
        '--prefix',
        type=str,
        default=None,
        help='ID prefix replacing the contig name'
    )
    rrna_parser.add_argument(
        '--strip-suffix',
        type=str,
        default=r'\.\d+$',
        help='regular expression removed from contig names to form ID prefixes'
    )
    rrna_parser.add_argument(
        '--types',
        type=str,
        default=None,
        help='comma-separated labels to emit, e.g. 16S,16S-23S-ITS (default: all)'
    )
    rrna_parser.add_argument(
        '--gff-out',
        type=str,
        default=None,
        help='write the final feature table, including ITS regions, as GFF3'
    )
    rrna_parser.add_argument(
        '--out', '-o',
        type=str,
        default='-',
        help='output path (- for stdout)'
    )

    # Select-columns command
    columns_parser = subparsers.add_parser(
        "select-columns",
        help="Select alignment columns by 0-based index",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    columns_parser.add_argument(
        'input',
        type=str,
        nargs='?',
        default='-',
        help='aligned FASTA (- for stdin)'
    )
    columns_parser.add_argument(
        '--columns', '-c',
        type=str,
        required=True,
        help='comma-separated 0-based indices or a-b ranges, kept in the given order'
    )
    columns_parser.add_argument(
        '--codon',
        action='store_true',
        help='treat indices as codons, each selecting three positions'
    )
    columns_parser.add_argument(
        '--out', '-o',
        type=str,
        default='-',
        help='output path (- for stdout)'
    )

    return parser

def run_lineage(config: SeqwrangleConfig) -> None:
    """
    Run the lineage command.

    Args:
        config: Configuration for the lineage command
    """
    from seqwrangle.core.taxonomy import TaxonomyDB, LineageResolver, parse_ranks, annotate_table
    from seqwrangle.io.parsers import open_text
    from seqwrangle.io.writers import open_output

    # Rank tokens are checked before the taxonomy is loaded
    ranks = parse_ranks(config.ranks)
    logger.debug(f"Requested ranks: {ranks}")

    taxonomy = TaxonomyDB.from_taxdump(config.taxdump)
    resolver = LineageResolver(taxonomy, ranks, config.output_mode, config.missing)

    with open_text(config.input) as in_handle, open_output(config.output) as out_handle:
        annotate_table(in_handle, out_handle, resolver, config.header, config.comment)

def run_concat(config: SeqwrangleConfig) -> None:
    """
    Run the concat command.

    Args:
        config: Configuration for the concat command
    """
    from seqwrangle.core.concat import create_matcher, concatenate_files
    from seqwrangle.io.writers import write_fasta, write_partitions

    matcher = create_matcher(config.id_mode, config.id_pattern, config.id_replacement)
    records, partitions = concatenate_files(config.alignments, matcher, config.gap_char)

    write_fasta(records, config.output)
    if config.partitions:
        write_partitions(partitions, config.partitions, config.model)

def run_extract_rrna(config: SeqwrangleConfig) -> None:
    """
    Run the extract-rrna command.

    Args:
        config: Configuration for the extract-rrna command
    """
    from seqwrangle.core.annotation import create_annotator
    from seqwrangle.core.rrna import RegionNamer, add_its, assign_ids, extract_regions
    from seqwrangle.io.parsers import GffParser, FastaParser
    from seqwrangle.io.writers import write_fasta, write_gff
    from seqwrangle.models.errors import InputError

    # Sequences are read before annotation so stdin is consumed only once
    records = FastaParser().parse(config.fasta) if config.fasta else None

    if config.gff:
        features, inline_sequences = GffParser().parse(config.gff)
        annotation_name = config.gff.name
    else:
        annotator = create_annotator(config.barrnap, config.kingdom, config.threads)
        if str(config.fasta) == '-':
            features, inline_sequences = annotator.annotate_records(records)
        else:
            features, inline_sequences = annotator.annotate(config.fasta)
        annotation_name = annotator.name

    if records is not None:
        source_name = 'stdin' if str(config.fasta) == '-' else config.fasta.name
    elif inline_sequences:
        records = list(inline_sequences.values())
        source_name = config.gff.name
    else:
        raise InputError(f"No sequences available: {config.gff} has no ##FASTA section and --fasta was not given")

    features = add_its(features, config.max_its_length)
    features = assign_ids(features, RegionNamer(config.prefix, config.strip_suffix))

    regions = extract_regions(
        records,
        features,
        source_name,
        annotation_name,
        types=config.types,
        min_length=config.min_length
    )
    write_fasta(regions, config.output)

    if config.gff_out:
        write_gff(features, config.gff_out)

def run_select_columns(config: SeqwrangleConfig) -> None:
    """
    Run the select-columns command.

    Args:
        config: Configuration for the select-columns command
    """
    from seqwrangle.core.columns import column_positions, select_columns
    from seqwrangle.io.parsers import FastaParser
    from seqwrangle.io.writers import write_fasta

    positions = column_positions(config.columns, config.codon)
    records = FastaParser().parse(config.input)
    write_fasta(select_columns(records, positions), config.output)

def main() -> int:
    """
    Main entry point for seqwrangle command-line interface.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args()

    # Setup logging
    logger = setup_logging(args.verbose, args.quiet)

    try:
        # Create configuration
        config = SeqwrangleConfig(args)

        # Dispatch to appropriate command handler
        if config.command == 'lineage':
            run_lineage(config)
        elif config.command == 'concat':
            run_concat(config)
        elif config.command == 'extract-rrna':
            run_extract_rrna(config)
        elif config.command == 'select-columns':
            run_select_columns(config)
        else:
            logger.error(f"Unknown command: {config.command}")
            return 1

        return 0

    except SeqwrangleError as e:
        logger.error(f"Error: {str(e)}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {str(e)}")
        return 1

if __name__ == "__main__":
    sys.exit(main())
