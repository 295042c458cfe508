"""Prompt builder for single-campaign email performance analysis."""

import math
from typing import Any, Mapping, Sequence, Tuple

_INSTRUCTIONS = (
    "As an email marketing analyst, analyze the following email's performance. "
    "Consider its Open Rate, Click Rate, Bounce Rate, and other provided metrics. "
    "Provide potential reasons for these metrics and suggest actionable insights "
    "for improvement."
)

MISSING_VALUE = "N/A"


def format_value(value: Any) -> str:
    """Render a cell the way it appears in the dashboard table.

    Integral floats drop the trailing ``.0`` so ``25.0`` reads as ``25``.
    """
    if value is None:
        return MISSING_VALUE
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


class EmailInsightPromptBuilder:
    """Builds a deterministic analysis prompt for one campaign row.

    ``metric_lines`` lists ``(column, is_rate)`` pairs in prompt order. Each
    line is ``<label>: <value>``; rate columns carry a ``%`` suffix.
    Columns missing from the row render as ``N/A``.
    """

    def __init__(self, metric_lines: Sequence[Tuple[str, bool]]) -> None:
        self._metric_lines = tuple(metric_lines)

    def build_prompt(self, row: Mapping[str, Any]) -> str:
        """Build the full prompt from a row mapping.

        Args:
            row: Column name to value, as produced by ``EmailRecord.as_dict``.

        Returns:
            A prompt string ready to send as the only user turn.
        """
        lines = []
        for column, is_rate in self._metric_lines:
            rendered = format_value(row.get(column))
            if is_rate and rendered != MISSING_VALUE:
                rendered = f"{rendered}%"
            lines.append(f"{column}: {rendered}")

        return f"{_INSTRUCTIONS}\n\n" + "\n".join(lines) + "\n"
