"""Completion results, supported models and their prices."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ModelName(str, Enum):
    GPT_3_5_TURBO = "gpt-3.5-turbo"
    GPT_4 = "gpt-4"
    GPT_4O = "gpt-4o"
    GPT_4_TURBO = "gpt-4-turbo"
    GPT_4O_MINI = "gpt-4o-mini"
    CLAUDE_HAIKU_4_5 = "claude-haiku-4-5"


DEFAULT_MODEL = ModelName.GPT_3_5_TURBO.value


class ModelPrice(BaseModel):
    """USD per one million tokens."""

    model_config = ConfigDict(frozen=True)

    input: float = 0.0
    output: float = 0.0


PRICES: dict[str, ModelPrice] = {
    ModelName.GPT_4O.value: ModelPrice(input=5, output=15),
    ModelName.GPT_4O_MINI.value: ModelPrice(input=0.15, output=0.6),
    ModelName.GPT_3_5_TURBO.value: ModelPrice(input=0.5, output=1.5),
    ModelName.GPT_4.value: ModelPrice(input=30, output=60),
    ModelName.GPT_4_TURBO.value: ModelPrice(input=10, output=30),
    ModelName.CLAUDE_HAIKU_4_5.value: ModelPrice(input=1, output=5),
}


def get_price(model: str) -> ModelPrice:
    return PRICES.get(model, ModelPrice())


def provider_for(model: str) -> str:
    """Which upstream API serves ``model``."""
    return "anthropic" if model.startswith("claude") else "openai"


class Completion(BaseModel):
    """A suggestion returned by a completion gateway."""

    text: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    model: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)


class CompletionPayload(BaseModel):
    """The JSON object the model is instructed to answer with."""

    completion: str


class EndpointResponse(BaseModel):
    """Success body of ``POST /api/complete-text``."""

    model_config = ConfigDict(populate_by_name=True)

    suggestion: str
    prompt_tokens: int = Field(default=0, alias="promptTokens")
    completion_tokens: int = Field(default=0, alias="completionTokens")
    response: dict[str, Any] = Field(default_factory=dict)


DEFAULT_PROMPT = """\
Du bist ein KI-Assistent, der darauf spezialisiert ist, Lernmaterialien in deutscher Sprache zu vervollständigen. \
Deine Aufgabe ist es, einen gegebenen Text zu ergänzen, indem du maximal einen Absatz oder zwei Sätze hinzufügst.

Beachte folgende Richtlinien bei der Textvervollständigung:
- Füge nur relevante und thematisch passende Informationen hinzu.
- Achte auf einen flüssigen Übergang zwischen dem vorhandenen Text und deiner Ergänzung.
- Verwende einen sachlichen und informativen Schreibstil, der für Lernmaterialien geeignet ist.
- Stelle sicher, dass deine Ergänzung grammatikalisch korrekt und stilistisch angemessen ist.
- Wenn deine Ergänzung mit einem Wort beginnt, so füge ein Leerzeichen am Anfang hinzu, \
damit sie korrekt an den vorhandenen Text angehängt werden kann.

Der gegebene Text wird im folgenden Benutzer-Prompt vorgegeben. Dieser hat das folgende Format:

<text>
{{TEXT}}
</text>

Vervollständige nun den Text, indem du maximal einen Absatz oder zwei Sätze hinzufügst. \
Achte darauf, dass deine Ergänzung nahtlos an den vorhandenen Text anschließt und die oben genannten Richtlinien befolgt.

Deine Antwort soll im JSON-Format erfolgen und folgende Felder enthalten:
- "completion": Der Text, den du zur Vervollständigung hinzufügst (maximal ein Absatz oder zwei Sätze).

Analysiere den gegebenen Text sorgfältig und erstelle dann eine passende Ergänzung. \
Gib deine Antwort im spezifizierten JSON-Format aus, ohne zusätzliche Erklärungen oder Kommentare."""
