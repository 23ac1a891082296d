"""
Top-level package for the Wedding Planner Dashboard API.

This file makes ``wedding_planner_api`` a Python package so that
modules within ``app`` can be imported using fully qualified names
like ``wedding_planner_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
