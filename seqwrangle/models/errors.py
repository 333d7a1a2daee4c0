"""Error classes for seqwrangle."""

class SeqwrangleError(Exception):
    """Base class for seqwrangle exceptions."""
    pass

class InputError(SeqwrangleError):
    """Raised when there's an issue with input files."""
    pass

class TaxonomyError(SeqwrangleError):
    """Raised when there's an issue with taxonomy."""
    pass

class AlignmentError(SeqwrangleError):
    """Raised when there's an issue with alignments."""
    pass

class AnnotationError(SeqwrangleError):
    """Raised when there's an issue with rRNA annotation."""
    pass

class SelectionError(SeqwrangleError):
    """Raised when there's an issue with alignment column selection."""
    pass
