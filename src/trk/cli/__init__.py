"""Command line interface for trk."""
