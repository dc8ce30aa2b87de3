"""Command line demo runner."""
