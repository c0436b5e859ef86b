#!/usr/bin/env python3
"""
NERC electric grid disturbance dashboard powered by Bokeh.

Run with:
    bokeh serve --show grid_dashboard.py
"""

from bokeh.io import curdoc

from nerc_dashboard.app import build_dashboard

build_dashboard(curdoc())
