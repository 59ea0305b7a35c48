from netviz.viz.registry import factory
from netviz.viz.strategies.bar_ranking import BarRankingController
from netviz.viz.strategies.bubble_scatter import BubbleScatterController
from netviz.viz.strategies.grouped_bars import GroupedBarsController
from netviz.viz.strategies.time_series import TimeSeriesController

# Register default controllers at import time
factory.register("bar_ranking", BarRankingController)
factory.register("time_series", TimeSeriesController)
factory.register("grouped_bars", GroupedBarsController)
factory.register("bubble_scatter", BubbleScatterController)
