"""Curated LLM models and the managed credential sentinel."""

PROVIDER = "openrouter"

CURATED_MODELS: tuple[str, ...] = (
    "google/gemini-3.1-pro-preview",
    "anthropic/claude-sonnet-4.6",
    "openai/gpt-5.2-codex",
    "moonshotai/kimi-k2.5",
    "minimax/minimax-m2.5",
)

# Placeholder clients send instead of a real key; the edge swaps in its own.
MANAGED_API_KEY_SENTINEL = "managed-openrouter-key"

_CURATED_MODEL_SET = frozenset(CURATED_MODELS)


def is_curated_model_id(model_id: object) -> bool:
    return isinstance(model_id, str) and model_id in _CURATED_MODEL_SET
