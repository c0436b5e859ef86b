"""Linked bar chart, cartogram and line chart of NERC grid disturbances."""

__version__ = "0.1.0"
