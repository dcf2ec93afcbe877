"""Reusable patterns shared by the service's verticals.

Currently: frozen-dataclass configuration with environment overrides.
"""
