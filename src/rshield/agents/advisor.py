"""Advisor Agent: simulation parameters + indicators -> expert narrative."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from rshield.agents.base import Agent, CLIBackend
from rshield.analysis.summary import SimulationSummary
from rshield.types.parameters import SimulationParameters

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an advisor on rumor propagation and counter-disinformation policy.
Answer in Markdown.
"""


class AdvisorAgent(Agent):
    """Write an assessment of a simulated rumor scenario.

    Two modes:
    1. Template-based (no backend): structured Markdown from the numbers
    2. Backend: narrative written by the remote model. Failures propagate
       as RemoteServiceError so the caller can show the message.
    """

    def __init__(self, backend: CLIBackend | None = None) -> None:
        super().__init__(backend)

    def run(
        self,
        topic: str,
        params: SimulationParameters,
        summary: SimulationSummary,
        locale: str = "en",
    ) -> str:
        if not topic.strip():
            raise ValueError("Topic must not be empty")

        if self.backend is None:
            return self._template_report(topic, params, summary)

        prompt = (
            f"Respond in locale '{locale}'. Assess the rumor \"{topic}\" "
            f"simulated with a delayed SEIR model.\n\n"
            f"{self._facts(params, summary)}\n\n"
            f"Cover the effect of the delay, the balance between prevention, "
            f"correction and suppression, and recommended timing."
        )
        logger.info(f"Requesting advisor narrative for topic {topic!r}")
        return self.backend.ask(prompt, system=SYSTEM_PROMPT)

    @staticmethod
    def _facts(params: SimulationParameters, summary: SimulationSummary) -> str:
        c = params.controls
        return "\n".join([
            f"- Delay tau: {params.delay} days",
            f"- beta={params.beta}, alpha={params.alpha}, gamma={params.gamma}, "
            f"N={params.population:.0f}",
            f"- Interventions from day {c.start}: prevention u_p={c.prevention}, "
            f"correction u_g={c.correction} (rho={c.correction_efficiency}), "
            f"suppression v={c.suppression}",
            f"- Rc={summary.rc:.3f}",
            f"- Observed peak {summary.peak_observed:.0f}, "
            f"simulated peak {summary.peak_simulated}",
        ])

    def _template_report(
        self, topic: str, params: SimulationParameters, summary: SimulationSummary,
    ) -> str:
        lines = []
        now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        lines.append(f"# Rumor Assessment: {topic}")
        lines.append(f"*Generated: {now}*\n")

        lines.append("## Model Inputs")
        lines.append(self._facts(params, summary))
        lines.append("")

        lines.append("## Control Status")
        if summary.rc == 0.0:
            lines.append("No suppression is configured, so Rc is not defined.")
        elif summary.controlled:
            lines.append(f"Rc = {summary.rc:.3f} <= 1: the rumor is contained.")
        else:
            lines.append(
                f"Rc = {summary.rc:.3f} > 1: outbreak risk. Raise suppression or "
                f"correction, or start interventions earlier than day "
                f"{params.controls.start}."
            )
        lines.append("")

        lines.append("## Indicators")
        lines.append("| Indicator | Value |")
        lines.append("|-----------|-------|")
        lines.append(f"| Simulated peak | {summary.peak_simulated} |")
        lines.append(f"| Observed peak | {summary.peak_observed:.0f} |")
        lines.append(f"| Final active spreaders | {summary.final_infected} |")
        lines.append(f"| Final disengaged | {summary.final_recovered} |")
        lines.append("")

        return "\n".join(lines)
