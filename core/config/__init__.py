"""Configuration package for the colony exporter.

Fixed protocol and cadence constants live in ``core.config.export``; runtime,
user-editable settings live in ``backend.settings``.
"""
