"""Rendering-thread-only helpers (portrait capture)."""
