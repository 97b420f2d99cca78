"""
Top-level package for statboard, a filter-driven stats dashboard.

This package exposes the core architecture (filters, queries, widgets, UI adapters).
Most code should import from submodules such as:
    statboard.core
    statboard.services
    statboard.widgets
    statboard.ui
"""

__all__: list[str] = []
