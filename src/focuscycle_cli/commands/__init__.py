"""Command modules for focuscycle."""
