"""rRNA annotator invocation for seqwrangle."""

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import List, Dict, Tuple, Iterable

from Bio import SeqIO
from Bio.SeqRecord import SeqRecord

from seqwrangle.models.errors import AnnotationError
from seqwrangle.models.features import FeatureInterval
from seqwrangle.io.parsers import parse_gff_lines

logger = logging.getLogger(__name__)

BARRNAP_KINGDOMS = ['bac', 'arc', 'euk', 'mito']

class Annotator:
    """Base class for rRNA annotation tools."""

    name = "annotator"

    def check_available(self) -> bool:
        """Check if the annotator executable is available.

        Returns:
            True if the annotator is available, False otherwise
        """
        raise NotImplementedError

    def annotate(self, fasta_path: Path) -> Tuple[Dict[str, List[FeatureInterval]], Dict[str, SeqRecord]]:
        """Annotate rRNA genes in the sequences of ``fasta_path``.

        Args:
            fasta_path: Path to the contig FASTA file

        Returns:
            Features grouped by contig, and any sequences reported by the tool

        Raises:
            AnnotationError: If the annotator fails
        """
        raise NotImplementedError

    def annotate_records(self, records: Iterable[SeqRecord]) -> Tuple[Dict[str, List[FeatureInterval]], Dict[str, SeqRecord]]:
        """Annotate records that are not backed by a file, e.g. ones read from stdin.

        The records are written to a temporary FASTA for the annotator.
        """
        with tempfile.NamedTemporaryFile("w", suffix=".fasta", encoding="utf-8") as handle:
            count = SeqIO.write(records, handle, "fasta")
            handle.flush()
            logger.debug(f"Wrote {count} sequences to {handle.name} for annotation")
            return self.annotate(Path(handle.name))

class BarrnapAnnotator(Annotator):
    """Annotator running barrnap and reading its GFF3 from stdout."""

    name = "barrnap"

    def __init__(self, executable: str = "barrnap", kingdom: str = "bac", threads: int = 1):
        if kingdom not in BARRNAP_KINGDOMS:
            raise AnnotationError(f"Unknown barrnap kingdom '{kingdom}', expected one of {BARRNAP_KINGDOMS}")
        self.executable = executable
        self.kingdom = kingdom
        self.threads = threads

    def check_available(self) -> bool:
        try:
            result = subprocess.run(
                [self.executable, "--version"],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=False
            )
            if result.returncode == 0:
                logger.info(f"{self.executable} found")
                return True
            else:
                logger.warning(f"{self.executable} check failed with return code: {result.returncode}")
                return False
        except (FileNotFoundError, PermissionError):
            logger.warning(f"{self.executable} not found in PATH")
            return False

    def command(self, fasta_path: Path) -> List[str]:
        return [
            self.executable,
            "--kingdom", self.kingdom,
            "--threads", str(self.threads),
            "--quiet",
            str(fasta_path),
        ]

    def annotate(self, fasta_path: Path) -> Tuple[Dict[str, List[FeatureInterval]], Dict[str, SeqRecord]]:
        cmd = self.command(fasta_path)
        logger.info(f"Running rRNA annotation with command: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                check=True
            )
        except FileNotFoundError:
            raise AnnotationError(f"Annotator executable not found: {self.executable}")
        except subprocess.CalledProcessError as e:
            raise AnnotationError(f"Error running {self.executable}: {e.stderr.strip() or str(e)}")

        return parse_gff_lines(result.stdout.splitlines())

def create_annotator(executable: str = "barrnap", kingdom: str = "bac", threads: int = 1) -> Annotator:
    """Factory function to create an available annotator.

    Raises:
        AnnotationError: If the annotator executable is not available
    """
    annotator = BarrnapAnnotator(executable=executable, kingdom=kingdom, threads=threads)
    if not annotator.check_available():
        raise AnnotationError(f"{executable} not available. Please install barrnap via conda or your package manager")
    return annotator
