"""Readers and writers for seqwrangle file formats."""
