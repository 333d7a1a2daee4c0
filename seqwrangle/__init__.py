"""seqwrangle: command-line utilities for taxonomy, alignment and rRNA wrangling."""

__version__ = "0.3.0"
