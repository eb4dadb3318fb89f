"""
Domain Constants

Centrally manages constants shared across the detector.
"""

SUPPORTED_LANGUAGES = ("pt", "en")

PLAN_TIERS = ("FREE", "PRO", "ENTERPRISE")

DEFAULT_MODEL = "gpt-4o-mini"

# Model pricing (USD / 1M tokens)
MODEL_PRICING = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.0},
    "gpt-4": {"input": 30.0, "output": 60.0},
    "gpt-3.5-turbo": {"input": 1.50, "output": 2.0},
    "claude-haiku-4-5-20251001": {"input": 0.80, "output": 4.0},
    "claude-sonnet-4-5-20250929": {"input": 3.0, "output": 15.0},
    "gemini-2.5-flash": {"input": 0.075, "output": 0.30},
    "gemini-2.5-pro": {"input": 1.25, "output": 5.0},
}

# Unknown models are priced like gpt-4o so the cost gate never under-counts them
_UNKNOWN_MODEL_PRICING = {"input": 2.50, "output": 10.0}

# Rough token estimate when the provider reports no usage
CHARS_PER_TOKEN = 4

# Per-user hourly budgets by plan
PLAN_HOURLY_COST_LIMITS = {
    "FREE": 0.01,
    "PRO": 0.50,
    "ENTERPRISE": 5.00,
}

PLAN_HOURLY_REQUEST_LIMITS = {
    "FREE": 10,
    "PRO": 100,
    "ENTERPRISE": 1000,
}

# Transition / hedging phrases typical of generated prose
AI_PHRASES = {
    "en": [
        "in conclusion", "furthermore", "moreover", "additionally", "however",
        "it is important to note", "it should be noted", "overall", "in summary",
        "to summarize", "in other words", "as mentioned", "as we can see",
        "it's worth noting", "on the other hand", "nevertheless", "consequently",
        "therefore", "thus", "first and foremost", "last but not least", "in light of",
    ],
    "pt": [
        "em conclusão", "além disso", "por outro lado", "é importante notar",
        "em resumo", "para resumir", "em outras palavras", "como mencionado",
        "como podemos ver", "vale notar", "no entanto", "consequentemente",
        "portanto", "assim", "primeiro lugar", "por último", "à luz de",
        "tendo em vista", "de fato", "na verdade",
    ],
}
