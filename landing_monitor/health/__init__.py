"""
Health module - Landing page evaluation engine.

This module provides URL normalization, response classification, per-target
result sets, cross-target aggregation, report rendering and notifications.
The composition root lives in landing_monitor.health.runner.
"""

from landing_monitor.health.config import load_config

__all__ = ["load_config"]
