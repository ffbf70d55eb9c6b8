"""Token usage and cost tally for a session."""

from __future__ import annotations

from dataclasses import dataclass, field

from ghostpad.models.completion import get_price


@dataclass
class UsageTracker:
    """Running totals across all completions of one editor session."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    cost: float = 0.0
    requests: int = 0
    by_model: dict[str, int] = field(default_factory=dict)

    def record(self, model: str, prompt_tokens: int, completion_tokens: int) -> float:
        """Add one response's usage. Returns the estimated cost of that response in USD."""
        price = get_price(model)
        cost = (price.input * prompt_tokens) / 1e6 + (price.output * completion_tokens) / 1e6
        self.prompt_tokens += prompt_tokens
        self.completion_tokens += completion_tokens
        self.cost += cost
        self.requests += 1
        self.by_model[model] = self.by_model.get(model, 0) + 1
        return cost
