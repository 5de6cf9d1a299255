"""Command-line entry points for extractbench."""
