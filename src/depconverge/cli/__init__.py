"""Command-line interface for depconverge."""
