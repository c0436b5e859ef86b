from nerc_dashboard.views.barchart import BarChart
from nerc_dashboard.views.cartogram import Cartogram
from nerc_dashboard.views.linechart import LineChart

__all__ = ["BarChart", "Cartogram", "LineChart"]
