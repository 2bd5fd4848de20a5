"""Learner implementations, one module per model family."""
