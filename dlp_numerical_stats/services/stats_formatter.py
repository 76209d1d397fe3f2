"""Text report for numerical stats results."""

from collections.abc import Iterator

from dlp_numerical_stats.domain.models import StatisticsResult


def format_value_range(result: StatisticsResult) -> str:
    """Format the min/max line.

    Example:
        >>> format_value_range(result)  # min=1, max=100
        'Value Range: [1, 100]'
    """
    return f"Value Range: [{result.min_value.raw_text}, {result.max_value.raw_text}]"


def iter_distinct_quantiles(result: StatisticsResult) -> Iterator[tuple[int, str]]:
    """Yield (rank, text) for each quantile that differs from the one before it.

    Ranks are 1-based positions in the full quantile sequence, so suppressed
    duplicates still advance the rank.

    Example:
        >>> list(iter_distinct_quantiles(result))  # [10, 10, 20, 20, 20, 30]
        [(1, '10'), (3, '20'), (6, '30')]
    """
    last_value: str | None = None
    for rank, quantile in enumerate(result.quantile_values, start=1):
        current_value = quantile.raw_text
        if current_value != last_value:
            yield rank, current_value
        last_value = current_value


def format_quantile_line(rank: int, value: str) -> str:
    return f"Value at {rank}% quantile: {value}"


def render_report(result: StatisticsResult) -> list[str]:
    """Build every output line for a result, range first."""
    lines = [format_value_range(result)]
    lines.extend(
        format_quantile_line(rank, value)
        for rank, value in iter_distinct_quantiles(result)
    )
    return lines


__all__ = [
    "format_quantile_line",
    "format_value_range",
    "iter_distinct_quantiles",
    "render_report",
]
