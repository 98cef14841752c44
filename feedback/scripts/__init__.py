"""Operator scripts. Run as modules, e.g. python -m feedback.scripts.preferences_report."""
