"""Small shared helpers (sorting keys, string normalization)."""
