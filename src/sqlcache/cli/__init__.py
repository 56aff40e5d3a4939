"""Command line interface for the SQL cache."""
