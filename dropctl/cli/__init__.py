"""Command-line interface for dropctl."""
