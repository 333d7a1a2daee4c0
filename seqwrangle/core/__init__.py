"""Core transformations for seqwrangle."""
