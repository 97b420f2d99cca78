from .post_stats_widget import PostStatsWidget
from .posts_chart_widget import PostsChartWidget, ViewsChartWidget

__all__ = ["PostStatsWidget", "PostsChartWidget", "ViewsChartWidget"]
