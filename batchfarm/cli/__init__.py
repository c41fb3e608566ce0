"""Command line interface for batchfarm."""
