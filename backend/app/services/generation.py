"""Grant proposal text generation with model fallback and offline synthesis."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Protocol
from urllib import error as urllib_error
from urllib import request as urllib_request

from app.config import Settings, get_settings
from app.schemas.proposal import ProposalFields

logger = logging.getLogger(__name__)

GRANT_WRITER_PERSONA = (
    "You are a professional grant writer with extensive experience in writing successful grant proposals. "
    "Your writing is persuasive, evidence-based, and follows best practices for grant writing."
)

_QUOTA_ERROR_CODES = {"insufficient_quota", "rate_limit_exceeded"}

_BUDGET_SHARES = (
    ("Personnel", 60, ("Project Director (1.0 FTE)", "Program Coordinators (2.0 FTE)", "Support Staff (1.5 FTE)")),
    (
        "Direct Services",
        25,
        ("Materials and supplies", "Transportation and outreach", "Technology and equipment"),
    ),
    (
        "Administrative Costs",
        15,
        ("Evaluation and reporting", "Training and professional development", "Administrative overhead"),
    ),
)


class GenerationError(RuntimeError):
    """Raised when proposal text cannot be produced by the model provider."""


class RateLimitedError(GenerationError):
    """Provider refused the request for rate-limit or quota reasons."""

    def __init__(self, message: str, *, status_code: int | None = None, error_code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class ChatCompletionClient(Protocol):
    """Protocol for chat completion providers."""

    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Return assistant text for the provided conversation."""


@dataclass(slots=True)
class OpenAIChatClient:
    """Minimal OpenAI chat completions client using stdlib HTTP."""

    api_key: str
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: int = 60

    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        payload: dict[str, object] = {"model": model, "messages": messages}
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if temperature is not None:
            payload["temperature"] = temperature
        url = f"{self.base_url.rstrip('/')}/chat/completions"
        req = urllib_request.Request(
            url=url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        try:
            with urllib_request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read().decode("utf-8")
        except urllib_error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            error_code = _error_code_from_detail(detail)
            if exc.code == 429 or error_code in _QUOTA_ERROR_CODES:
                raise RateLimitedError(
                    f"OpenAI HTTP {exc.code}: {detail}",
                    status_code=exc.code,
                    error_code=error_code,
                ) from exc
            raise GenerationError(f"OpenAI HTTP {exc.code}: {detail}") from exc
        except urllib_error.URLError as exc:
            raise GenerationError(f"OpenAI request failed: {exc.reason}") from exc

        try:
            decoded = json.loads(raw)
            content = decoded["choices"][0]["message"]["content"]
            if not isinstance(content, str) or not content.strip():
                raise TypeError("assistant message content missing")
            return content.strip()
        except (KeyError, IndexError, TypeError, json.JSONDecodeError) as exc:
            raise GenerationError("OpenAI returned an unexpected chat response") from exc


def get_default_chat_client(settings: Settings | None = None) -> ChatCompletionClient | None:
    """Return the configured provider client, or None when no API key is set."""

    settings = settings or get_settings()
    if not settings.openai_api_key:
        return None
    return OpenAIChatClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout_seconds=settings.openai_timeout_seconds,
    )


def generate_grant_proposal(
    fields: ProposalFields,
    *,
    chat_client: ChatCompletionClient | None = None,
    settings: Settings | None = None,
) -> str:
    """Generate proposal text: primary model, then fallback model, then local synthesis.

    Rate-limit and quota failures walk down the chain and always yield text.
    Any other provider failure raises `GenerationError`.
    """

    settings = settings or get_settings()
    client = chat_client or get_default_chat_client(settings)
    if client is None:
        logger.info("generation.synthesized reason=no_api_key project_title=%r", fields.project_title)
        return synthesize_proposal(fields)

    prompt = build_generation_prompt(fields)
    try:
        return client.complete(
            [{"role": "user", "content": f"{GRANT_WRITER_PERSONA}\n\n{prompt}"}],
            model=settings.openai_model,
        )
    except RateLimitedError as exc:
        logger.warning(
            "generation.primary_rate_limited model=%s status=%s code=%s",
            settings.openai_model,
            exc.status_code,
            exc.error_code,
        )
    except GenerationError:
        logger.exception("generation.primary_failed model=%s", settings.openai_model)
        raise

    try:
        return client.complete(
            [
                {"role": "system", "content": GRANT_WRITER_PERSONA},
                {"role": "user", "content": prompt},
            ],
            model=settings.openai_fallback_model,
            max_tokens=settings.openai_fallback_max_tokens,
            temperature=settings.openai_fallback_temperature,
        )
    except GenerationError as exc:
        logger.warning("generation.fallback_failed model=%s error=%s", settings.openai_fallback_model, exc)

    logger.info("generation.synthesized reason=all_models_failed project_title=%r", fields.project_title)
    return synthesize_proposal(fields)


def build_generation_prompt(fields: ProposalFields) -> str:
    return f"""
You are a professional grant writer. Generate a full grant proposal draft based on the following information:

Organization Name: {fields.organization_name}
Project Title: {fields.project_title}
Mission Statement: {fields.mission}
Project Description: {fields.description}
Target Population: {fields.target_population}
Amount Requested: ${fields.amount}
Timeline: {fields.timeline}
Goals and Outcomes: {fields.goals}

The proposal should include:
- Executive Summary (2-3 paragraphs)
- Statement of Need (3-4 paragraphs with compelling statistics and evidence)
- Project Description (detailed methodology, implementation plan, 4-5 paragraphs)
- Goals & Objectives (specific, measurable outcomes with timeline)
- Budget Justification (detailed breakdown of how funds will be used)
- Evaluation Plan (metrics, assessment methods, accountability measures)
- Organizational Capacity (demonstrate ability to execute the project)
- Sustainability Plan (long-term impact and continuation)

The tone should be formal, persuasive, and clearly show how the project aligns with typical funder priorities. \
Use professional language and include compelling evidence for the need. Make it comprehensive and ready for submission.

Format the response with clear section headers and professional formatting.
""".strip()


def synthesize_proposal(fields: ProposalFields) -> str:
    """Deterministic offline draft built only from the form fields."""

    f = fields
    budget_lines: list[str] = []
    for label, percent, items in _BUDGET_SHARES:
        budget_lines.append(f"**{label} ({percent}% - {_budget_share(f.amount, percent)}):**")
        budget_lines.extend(f"- {item}" for item in items)
        budget_lines.append("")
    budget = "\n".join(budget_lines).rstrip()

    return f"""# Grant Proposal: {f.project_title}

## Executive Summary

{f.organization_name} respectfully requests ${f.amount} over {f.timeline} to implement the {f.project_title}. \
This innovative initiative addresses critical needs within {f.target_population} by {f.description}.

Our organization's mission is to {f.mission}. Through this project, we will directly impact the lives of \
hundreds of individuals while establishing sustainable solutions for long-term community benefit.

## Statement of Need

The target population of {f.target_population} faces significant challenges that require immediate intervention. \
Current data indicates a substantial gap in services, with limited resources available to address these pressing needs.

Research demonstrates that targeted interventions similar to our proposed project yield measurable improvements \
in community outcomes. The urgency of this need cannot be overstated, as delays in implementation result in \
continued hardship for those we aim to serve.

## Project Description

### Methodology

Our approach combines evidence-based practices with innovative solutions tailored to the specific needs of \
{f.target_population}. The project will be implemented through a phased approach over {f.timeline}, ensuring \
systematic development and continuous quality improvement.

### Implementation Plan

**Phase 1 (Months 1-3):** Project startup, staff recruitment, and initial assessments
**Phase 2 (Months 4-8):** Full program implementation and service delivery
**Phase 3 (Months 9-12):** Evaluation, sustainability planning, and program optimization

### Expected Impact

This initiative will directly serve {f.target_population}, providing essential services and support. We anticipate \
measurable improvements in key indicators, including increased access to resources, enhanced community capacity, \
and improved quality of life outcomes.

## Goals & Objectives

{f.goals}

**Specific Measurable Outcomes:**
- Serve a minimum of 500 individuals annually
- Achieve 85% participant satisfaction rates
- Establish partnerships with 5 local organizations
- Reduce service gaps by 40% within the target population

## Budget Justification

The requested ${f.amount} will be allocated strategically across the following categories:

{budget}

## Evaluation Plan

Our comprehensive evaluation framework includes both process and outcome measures:

**Process Evaluation:**
- Monthly progress reports
- Quarterly stakeholder surveys
- Continuous program monitoring

**Outcome Evaluation:**
- Pre/post assessments with participants
- Community impact measurements
- Long-term follow-up studies

## Organizational Capacity

{f.organization_name} brings extensive experience and proven track record in serving {f.target_population}. \
Our organization has successfully managed similar initiatives, demonstrating our capacity to deliver results \
within budget and timeline constraints.

**Key Organizational Strengths:**
- Experienced leadership team
- Strong community partnerships
- Proven financial management
- Established evaluation systems

## Sustainability Plan

This project is designed with sustainability as a core principle. By the end of the grant period, we will have:

- Developed diversified funding sources
- Established fee-for-service components
- Created organizational policy changes
- Built community capacity for program continuation

**Long-term Funding Strategy:**
- Government contracts (40%)
- Foundation grants (30%)
- Corporate partnerships (20%)
- Individual donations (10%)

## Conclusion

The {f.project_title} represents a critical investment in {f.target_population}. With your support, \
{f.organization_name} will implement this evidence-based initiative, creating lasting positive change and \
establishing a model for replication in other communities.

We respectfully request your partnership in this vital work and look forward to discussing this proposal further.

---

*This proposal was generated using AI assistance. Please review and customize as needed for your specific \
funder requirements.*"""


def _budget_share(amount: str, percent: int) -> str:
    cleaned = amount.replace("$", "").replace(",", "").strip()
    try:
        total = float(cleaned)
    except ValueError:
        return "N/A"
    if not math.isfinite(total) or total < 0:
        return "N/A"
    return f"${int(total * percent / 100 + 0.5):,}"


def _error_code_from_detail(detail: str) -> str | None:
    try:
        decoded = json.loads(detail)
    except json.JSONDecodeError:
        return None
    if not isinstance(decoded, dict):
        return None
    error = decoded.get("error")
    if isinstance(error, dict) and isinstance(error.get("code"), str):
        return error["code"]
    return None
