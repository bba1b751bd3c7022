"""Utility helpers: card security, filter validation, audit lines, metrics."""
