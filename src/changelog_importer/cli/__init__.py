"""Command line interface for changelog-importer."""
