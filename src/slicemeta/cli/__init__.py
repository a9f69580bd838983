"""Command-line interface for slicemeta."""
