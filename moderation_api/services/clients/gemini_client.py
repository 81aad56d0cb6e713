from google import genai
from google.genai import types
from moderation_api.services.base.moderation_model import BaseModerationModel


class GeminiModerationClient(BaseModerationModel):
    def __init__(self, api_key: str):
        self.client = genai.Client(api_key=api_key)

    async def generate_content(self, *, model, contents, system_instruction, response_mime_type):
        return await self.client.aio.models.generate_content(
            model=model,
            contents=contents,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                response_mime_type=response_mime_type,
            )
        )
