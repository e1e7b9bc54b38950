"""
Core module - Entities and ports shared by all layers.
"""
