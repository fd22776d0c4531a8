"""Trend Fetcher Agent: keywords + date range -> daily interest series."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from rshield.agents.base import Agent, CLIBackend, parse_json_block
from rshield.errors import RemoteServiceError

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 5

SYSTEM_PROMPT = """\
You are a search-trend data service. Respond with a single JSON object and
nothing else.
"""


class ChecklistItem(BaseModel):
    """One rumor warning sign and whether it was detected."""

    sign: str
    detected: bool = False
    reason: str = ""


class TrendReport(BaseModel):
    """Daily interest rows plus the service's narrative."""

    data: list[dict[str, Any]] = Field(default_factory=list)
    summary: str = ""
    checklist: list[ChecklistItem] = Field(default_factory=list)

    def keyword_rows(self, keyword: str) -> list[dict[str, Any]]:
        """Rows reduced to date and one keyword's index."""
        return [{"date": r.get("date"), keyword: r.get(keyword, 0)} for r in self.data]


class TrendFetcherAgent(Agent):
    """Fetch a daily 0-100 interest index for up to five keywords."""

    def __init__(self, backend: CLIBackend | None = None) -> None:
        super().__init__(backend)

    def run(
        self,
        keywords: list[str],
        start_date: date,
        end_date: date,
        locale: str = "en",
    ) -> TrendReport:
        """Request the series and validate the response.

        Raises:
            ValueError: no keywords, too many keywords, or start after end.
            RemoteServiceError: no backend, a failed call, or a response
                without a ``data`` list.
        """
        if not keywords:
            raise ValueError("At least one keyword is required")
        if len(keywords) > MAX_KEYWORDS:
            raise ValueError(f"At most {MAX_KEYWORDS} keywords are supported")
        if start_date > end_date:
            raise ValueError(f"Start date {start_date} is after end date {end_date}")
        if self.backend is None:
            raise RemoteServiceError("No AI backend configured")

        n_days = (end_date - start_date).days + 1
        prompt = (
            f"Daily search interest (0-100) for: {', '.join(keywords)}.\n"
            f"Region/locale: {locale}. Range: {start_date.isoformat()} to "
            f"{end_date.isoformat()} ({n_days} days).\n"
            'Return {"data": [{"date": "YYYY-MM-DD", "<keyword>": <index>, ...}], '
            '"summary": "<events driving the trend>", '
            '"checklist": [{"sign": "...", "detected": true, "reason": "..."}]} '
            "with exactly one data row per day."
        )
        raw = self.backend.ask(prompt, system=SYSTEM_PROMPT)

        parsed = parse_json_block(raw)
        if not parsed or not isinstance(parsed.get("data"), list):
            logger.warning(f"Unparseable trend response: {raw[:200]!r}")
            raise RemoteServiceError("Invalid AI response")

        rows = [r for r in parsed["data"] if isinstance(r, dict)]
        rows.sort(key=lambda r: str(r.get("date", "")))
        logger.info(f"Fetched {len(rows)} trend rows for {len(keywords)} keywords")
        try:
            return TrendReport(
                data=rows,
                summary=str(parsed.get("summary", "")),
                checklist=parsed.get("checklist") or [],
            )
        except ValidationError as e:
            raise RemoteServiceError("Invalid AI response") from e
