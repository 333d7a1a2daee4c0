"""Data models, configuration and errors for seqwrangle."""
