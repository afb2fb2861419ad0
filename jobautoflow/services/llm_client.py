import json
import logging
import re
from typing import Any

import boto3
from botocore.config import Config

from jobautoflow.config import settings
from jobautoflow.core.errors import AIScoringUnavailable

logger = logging.getLogger(__name__)

REQUIRED_MATCH_FIELDS = ("score", "reasons", "details")


def _call_bedrock_llm(
    prompt: str,
    system_prompt: str | None = None,
    timeout: float | None = None,
) -> str:
    """Call Bedrock LLM via converse API and return response text."""
    timeout = timeout or settings.llm_timeout_seconds
    try:
        client = boto3.client(
            "bedrock-runtime",
            region_name=settings.aws_region,
            config=Config(
                read_timeout=timeout,
                connect_timeout=min(timeout, 10),
                retries={"max_attempts": 1},
            ),
        )
        kwargs: dict[str, Any] = {
            "modelId": settings.bedrock_llm_model_id,
            "messages": [
                {
                    "role": "user",
                    "content": [{"text": prompt}],
                }
            ],
            "inferenceConfig": {
                "maxTokens": settings.llm_max_tokens,
                "temperature": settings.llm_temperature,
            },
        }
        if system_prompt:
            kwargs["system"] = [{"text": system_prompt}]
        response = client.converse(**kwargs)

        blocks = (response.get("output") or {}).get("message", {}).get("content", [])
        text = "".join(b.get("text", "") for b in blocks if isinstance(b, dict)).strip()
        logger.debug("Bedrock LLM response length=%d", len(text))
        return text
    except Exception as e:
        logger.warning("Bedrock LLM call failed: %s", e)
        raise


def is_llm_enabled() -> bool:
    """Whether Bedrock LLM is enabled."""
    return bool(settings.bedrock_llm_enabled and settings.bedrock_llm_model_id and settings.aws_region)


def _extract_json(text: str) -> dict[str, Any]:
    clean = re.sub(r"^```(?:json)?\s*", "", text.strip(), flags=re.IGNORECASE)
    clean = re.sub(r"\s*```$", "", clean).strip()
    try:
        obj = json.loads(clean)
    except json.JSONDecodeError:
        m = re.search(r"\{[\s\S]*\}", clean)
        if not m:
            raise
        obj = json.loads(m.group(0))
    if not isinstance(obj, dict):
        raise ValueError("LLM response is not a JSON object")
    return obj


def llm_score_match(prompt: str, system_prompt: str) -> dict[str, Any]:
    """
    Ask the model for a match verdict and return the parsed JSON object
    ({"score", "reasons", "details"}). Any failure, including a timeout,
    bad JSON or a missing field, raises AIScoringUnavailable.
    """
    try:
        text = _call_bedrock_llm(prompt, system_prompt=system_prompt)
    except Exception as e:
        raise AIScoringUnavailable(f"LLM call failed: {e}") from e
    if not text:
        raise AIScoringUnavailable("Empty response from LLM")
    try:
        obj = _extract_json(text)
    except (json.JSONDecodeError, ValueError) as e:
        raise AIScoringUnavailable(f"Could not parse LLM response: {e}") from e
    missing = [field for field in REQUIRED_MATCH_FIELDS if field not in obj]
    if missing:
        raise AIScoringUnavailable(f"LLM response missing fields: {', '.join(missing)}")
    return obj
