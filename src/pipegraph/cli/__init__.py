"""Command-line interface for pipegraph."""
