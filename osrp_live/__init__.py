"""OSRP Live - live roleplay stream discovery backend"""

__version__ = "1.0.0"
