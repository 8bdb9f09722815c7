"""Command line interface for ticket lifecycles."""
