"""Command-line entry points for the Silica host."""
