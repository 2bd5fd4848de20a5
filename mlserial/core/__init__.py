"""Data, measure and seed helpers shared across the package."""
