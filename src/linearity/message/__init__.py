"""Merge commit message composition."""
