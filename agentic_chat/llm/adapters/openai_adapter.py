from typing import AsyncIterator, List, Optional, Type, TypeVar
from openai import AsyncOpenAI
from pydantic import BaseModel

from ..interface import LLMProvider
from ...config import settings

T = TypeVar("T", bound=BaseModel)

class OpenAIAdapter(LLMProvider):
    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = settings.OPENAI_MODEL,
        chat_model_name: Optional[str] = None,
    ):
        self.client = AsyncOpenAI(api_key=api_key)
        self.model_name = model_name
        # Conversational replies may use a larger model than the planning calls.
        self.chat_model_name = chat_model_name or model_name

    async def generate_structured_output(
        self,
        messages: List[dict],
        response_model: Type[T],
        temperature: float = 0.0
    ) -> T:
        completion = await self.client.beta.chat.completions.parse(
            model=self.model_name,
            messages=messages,
            response_format=response_model,
            temperature=temperature,
        )

        # We unwrap the specific OpenAI response structure here
        return completion.choices[0].message.parsed

    async def generate_text(
        self,
        messages: List[dict],
        temperature: float = 0.0
    ) -> str:
        completion = await self.client.chat.completions.create(
            model=self.model_name,
            messages=messages,
            temperature=temperature,
        )
        return completion.choices[0].message.content or ""

    async def stream_text(
        self,
        messages: List[dict],
        temperature: float = 0.0
    ) -> AsyncIterator[str]:
        stream = await self.client.chat.completions.create(
            model=self.chat_model_name,
            messages=messages,
            temperature=temperature,
            stream=True,
        )
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta
