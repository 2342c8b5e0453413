"""Element synthesis through an OpenAI-compatible chat completion endpoint.

The model output is untrusted: the envelope and the inner JSON object are
both validated, and anything that does not match the expected shape is a
SynthesisError. Results are not deterministic; which answer becomes the
global recipe is decided by the store, not here.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from alchemist.errors import SynthesisError
from alchemist.load_secrets import openai_api_key, openai_base_url, openai_model, openai_timeout
from alchemist.models.dc_models import SynthesizedElementModel

DEFAULT_TEMPERATURE = 0.8

SYSTEM_PROMPT = "You only answer with transformed concepts as a JSON object."

USER_PROMPT_TEMPLATE = """You are the engine of an infinite crafting game. You combine two elements and produce a NEW and UNEXPECTED concept.

GOOD COMBINATIONS (the result surprises, it is not obvious):
Fire + Water = Steam | Earth + Fire = Lava | Human + Fire = Cook
Storm + Ecosystem = Hurricane | Fury + Nature = Volcano | Storm + Storm = Typhoon
Warrior + North = Viking | Wizard + Fire = Gandalf | Science + Human = Einstein
Hero + City = Batman | Robot + Intelligence = AI | Ocean + Life = Mermaid

KINDS OF RESULTS (be ambitious):
- Elements: Lava, Steam, Typhoon, Hurricane, Plasma, Aurora
- Creatures: Dragon, Phoenix, Mermaid, Unicorn, Leviathan
- Real people: Einstein, Darwin, Tesla, Cleopatra, Napoleon
- Fictional characters: Batman, Goku, Gandalf, Poseidon, Thor
- Places: Rome, Olympus, Atlantis, Sahara, Pompeii
- Concepts: Chaos, Karma, Entropy, Apocalypse, Renaissance
- Technology: Rocket, Nuclear, Satellite, Laser

CRITICAL RULES:
1. Never use words from the input elements in the result (no variants, no direct synonyms)
2. The result must be a concept DIFFERENT from both inputs, not a literal mix
3. At most 2 words, no articles and no prepositions
4. The emoji visually represents the result
5. The colorHex (#RRGGBB) evokes the color of the result

Elements: "{first}" + "{second}"
JSON: {{"name":"...","emoji":"...","colorHex":"#..."}}"""


class ElementSynthesizer:
    """Ask a chat model for the element produced by combining two names.

    It expects:
      - base_url like "https://api.openai.com/v1" or an OpenAI-compatible URL
      - api_key for Authorization: Bearer ...
      - model name like "gpt-4o-mini"
    """

    def __init__(
        self,
        api_key: Optional[str] = openai_api_key,
        model: str = openai_model,
        base_url: str = openai_base_url,
        timeout: float = openai_timeout,
        temperature: float = DEFAULT_TEMPERATURE,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.temperature = temperature
        self._client = client

    async def synthesize(self, first: str, second: str) -> SynthesizedElementModel:
        """Produce a new element for the pair

        Args:
            first (str): First element name as the player typed it
            second (str): Second element name

        Raises:
            SynthesisError: Transport failure, error status or invalid output

        Returns:
            SynthesizedElementModel: Validated name, emoji and color
        """
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": self.build_messages(first, second),
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }
        data = await self._post_completion(payload)
        element = self.parse_completion(data)
        logging.info(f"Synthesized {first} + {second} = {element.name}")
        return element

    @staticmethod
    def build_messages(first: str, second: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": USER_PROMPT_TEMPLATE.format(first=first, second=second)},
        ]

    async def _post_completion(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise SynthesisError("LLM API key not configured.")

        url = f"{self.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        try:
            if self._client is not None:
                resp = await self._client.post(url, json=payload, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise SynthesisError(f"LLM provider timed out: {e}") from e
        except httpx.HTTPError as e:
            raise SynthesisError(f"Error contacting LLM provider: {e}") from e

        if resp.status_code != 200:
            raise SynthesisError(f"LLM provider returned {resp.status_code}: {resp.text}")

        try:
            data = resp.json()
        except ValueError as e:
            raise SynthesisError(f"Invalid JSON from LLM provider: {e}") from e

        if not isinstance(data, dict):
            raise SynthesisError("LLM provider returned a non-object envelope")
        return data

    @staticmethod
    def parse_completion(data: Dict[str, Any]) -> SynthesizedElementModel:
        """Extract and validate the element from a chat completion envelope

        Args:
            data (Dict[str, Any]): Decoded response body

        Raises:
            SynthesisError: Missing content, non-JSON content or schema mismatch

        Returns:
            SynthesizedElementModel: The validated element
        """
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise SynthesisError("Completion has no choices")
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise SynthesisError("Completion has no message content")

        try:
            raw = json.loads(content)
        except json.JSONDecodeError as e:
            raise SynthesisError(f"Model content is not JSON: {e}") from e
        if not isinstance(raw, dict):
            raise SynthesisError("Model content is not a JSON object")

        try:
            return SynthesizedElementModel.model_validate(raw)
        except ValidationError as e:
            raise SynthesisError(f"Model content does not match the element schema: {e}") from e

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
