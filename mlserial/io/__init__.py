"""Snapshot, envelope and side-file handling for machine persistence."""
