import json
import logging
from pydantic import ValidationError

from moderation_api.core.errors import (
    EmptyModerationOutputError,
    MalformedVerdictError,
    ModerationProviderError,
)
from moderation_api.schemas.moderation import ModerationVerdict
from moderation_api.services.base.moderation_model import BaseModerationModel
from moderation_api.services.builders.moderation_prompt_builder import (
    build_system_instruction,
    build_user_contents,
)

logger = logging.getLogger(__name__)

RESPONSE_MIME_TYPE = "application/json"


def extract_text(response):
    """Return the text of the first part of the first candidate, or None."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None)
    if not parts:
        return None
    return getattr(parts[0], "text", None)


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_verdict(output: str) -> dict:
    try:
        data = json.loads(output, parse_constant=_reject_constant)
        ModerationVerdict.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise MalformedVerdictError(f"Provider returned an unusable verdict: {e}") from e
    return data


class Moderator:
    def __init__(self, client: BaseModerationModel, model: str = "gemini-1.5-flash"):
        self.client = client
        self.model = model
        self.system_instruction = build_system_instruction()

    async def moderate(self, user_content: str) -> dict:
        try:
            response = await self.client.generate_content(
                model=self.model,
                contents=build_user_contents(user_content),
                system_instruction=self.system_instruction,
                response_mime_type=RESPONSE_MIME_TYPE,
            )
        except Exception as e:
            raise ModerationProviderError(f"{type(e).__name__}: {e}") from e

        output = extract_text(response)
        if not output:
            raise EmptyModerationOutputError("No content returned from AI")

        verdict = parse_verdict(output)
        logger.debug(f"[MODERATION] Verdict: safe={verdict['safe']}")
        return verdict
