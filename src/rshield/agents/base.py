"""Base agent class and generative-AI command line backend."""

from __future__ import annotations

import json
import logging
import re
import subprocess
import time
from abc import ABC, abstractmethod
from typing import Any

from rshield.errors import RemoteServiceError

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?")


def parse_json_block(text: str) -> dict[str, Any] | None:
    """Leniently parse a JSON object out of model output.

    Strips Markdown code fences and keeps the outermost ``{...}``.
    Returns None when nothing parseable is found.
    """
    body = _FENCE.sub("", text or "").strip()
    first, last = body.find("{"), body.rfind("}")
    if first != -1 and last != -1:
        body = body[first:last + 1]
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


class CLIBackend:
    """LLM backend using a generative-AI CLI as a subprocess.

    Invokes ``<executable> -p <prompt>``, optionally parsing JSON output.
    Supports system prompts, retries with exponential backoff, and timeout.
    """

    def __init__(
        self,
        executable: str = "gemini",
        max_retries: int = 3,
        timeout: int = 120,
        output_format: str = "json",
    ) -> None:
        self.executable = executable
        self.max_retries = max_retries
        self.timeout = timeout
        self.output_format = output_format

    def ask(self, prompt: str, system: str | None = None) -> str:
        """Send a prompt and return the response text.

        Args:
            prompt: The user prompt.
            system: Optional system prompt, prepended to the user prompt.

        Raises:
            RemoteServiceError: after the last failed attempt.
        """
        if system:
            prompt = f"{system}\n\n{prompt}"
        cmd = [self.executable, "-p", prompt]
        if self.output_format == "json":
            cmd.extend(["--output-format", "json"])

        last_error = "no attempts made"
        for attempt in range(1, self.max_retries + 1):
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=True,
                )
                if self.output_format != "json":
                    return result.stdout.strip()
                try:
                    response = json.loads(result.stdout)
                except json.JSONDecodeError:
                    return result.stdout.strip()
                if isinstance(response, dict):
                    return str(response.get("result", response.get("response", result.stdout)))
                return result.stdout.strip()

            except subprocess.TimeoutExpired:
                last_error = f"timed out after {self.timeout}s"
                logger.warning(f"AI CLI timed out (attempt {attempt}/{self.max_retries})")
            except subprocess.CalledProcessError as e:
                last_error = (e.stderr or "").strip()[:200] or f"exit status {e.returncode}"
                logger.warning(
                    f"AI CLI error (attempt {attempt}/{self.max_retries}): {last_error}"
                )
            except FileNotFoundError:
                raise RemoteServiceError(f"AI CLI not found: {self.executable}") from None

            if attempt < self.max_retries:
                time.sleep(2**attempt)

        raise RemoteServiceError(
            f"AI CLI failed after {self.max_retries} attempts: {last_error}"
        )


class Agent(ABC):
    """Base class for agents that wrap one remote task.

    Agents without a backend fall back to deterministic local behavior
    where the task allows it.
    """

    def __init__(self, backend: CLIBackend | None = None) -> None:
        self.backend = backend
        self.name = self.__class__.__name__

    @abstractmethod
    def run(self, *args: Any, **kwargs: Any) -> Any:
        """Execute the agent's primary task."""

    def __repr__(self) -> str:
        return f"{self.name}(backend={'cli' if self.backend else 'local'})"
