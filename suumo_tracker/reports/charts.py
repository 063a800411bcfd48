"""
Trend chart rendering.

Draws the average price per m² of each category over the stored days into
a single PNG line chart.
"""

from datetime import date
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from loguru import logger  # noqa: E402

from suumo_tracker.modules.metrics import DailyMetrics  # noqa: E402

chart_log = logger.bind(module="Charts")

CHART_FILENAME = "price_size_trend.png"

# Line colour per category; unknown categories cycle through FALLBACK_COLORS
COLOR_THEME = {
    "all": "#D62728",  # red
    "koto": "#1F77B4",  # blue-dark
    "kamedo": "#00E272",  # blue-light
    "shinagawa": "#9467BD",  # purple-dark
    "minamioi": "#C5B0D5",  # purple-light
    "meguro": "#2CA02C",  # green-dark
    "honcho": "#74C476",  # green-light
}
FALLBACK_COLORS = ["#FF7F0E", "#8C564B", "#E377C2", "#7F7F7F", "#BCBD22", "#17BECF"]

Entries = list[tuple[date, DailyMetrics]]


def build_series(entries: Entries, category: str) -> list[tuple[int, float]]:
    """
    Build (index, value) points for one category.

    Days where the category has no average are skipped.
    """
    points = []
    for idx, (_, metrics) in enumerate(entries):
        value = metrics.avgs.get(category)
        if value is None:
            continue
        points.append((idx, float(value)))
    return points


def date_labels(entries: Entries) -> dict[int, str]:
    """X axis labels (MM/DD) by index."""
    return {idx: day.strftime("%m/%d") for idx, (day, _) in enumerate(entries)}


def value_range(values: list[float]) -> tuple[float, float]:
    """Y axis range with 5% padding, never below zero."""
    return max(min(values) * 0.95, 0), max(values) * 1.05


def color_for(category: str, position: int) -> str:
    """Line colour for a category."""
    return COLOR_THEME.get(category) or FALLBACK_COLORS[position % len(FALLBACK_COLORS)]


def render_trend_chart(
    entries: Entries,
    categories: list[str],
    path: str | Path,
    title: str | None = None,
) -> Path | None:
    """
    Render the combined price per size trend chart.

    Args:
        entries: (date, DailyMetrics) pairs in ascending order
        categories: Category names to draw, in legend order
        path: Output PNG path
        title: Chart title (defaults to "Price per Size (Last N days)")

    Returns:
        Written path, or None when there is nothing to draw
    """
    if not entries:
        return None

    series = {name: build_series(entries, name) for name in categories}
    all_values = [value for points in series.values() for _, value in points]
    if not all_values:
        chart_log.warning("No averages to draw")
        return None

    fig, ax = plt.subplots(figsize=(9, 6), dpi=100)
    try:
        for position, (name, points) in enumerate(series.items()):
            if not points:
                continue
            xs = [idx for idx, _ in points]
            ys = [value for _, value in points]
            ax.plot(
                xs, ys,
                label=name.capitalize(),
                color=color_for(name, position),
                linewidth=3,
                marker="o",
            )

        labels = date_labels(entries)
        ax.set_xticks(list(labels.keys()))
        ax.set_xticklabels(list(labels.values()), rotation=45, fontsize=9)
        ax.set_ylim(*value_range(all_values))
        ax.set_title(title or f"Price per Size (Last {len(entries)} days)", fontsize=18)
        ax.grid(True, color="#E5E7EB")
        ax.legend(loc="best")
        fig.tight_layout()

        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out)
    finally:
        plt.close(fig)

    chart_log.info(f"Chart written to {out}")
    return out
