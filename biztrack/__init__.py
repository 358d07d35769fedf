"""
BizTrack - Reorder & Stock-Replenishment Engine
"""

__version__ = "1.0.0"
