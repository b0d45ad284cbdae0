"""Command-line interface for downgrade-build."""
