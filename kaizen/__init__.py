"""Kaizen Automation — 60-day roadmap, checklist and cost tracker."""

__version__ = "0.1.0"
