"""Shared helpers: text heuristics, caching, validation."""
