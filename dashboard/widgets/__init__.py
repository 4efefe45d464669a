# dashboard/widgets/__init__.py

from .core import (
    category_chart,
    kpi_card,
    locations_frame,
    metric_cards,
    reports_frame,
    style_tiers,
)
