"""
LLM analyzer

Implements LLMAnalyzer, which asks a chat model for a structured AI-likelihood
verdict and validates the JSON it returns.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from truecheck_core.infrastructure.model_clients.base import ModelClient

from truecheck_core.detector_config import LLMConfig
from truecheck_core.domain.constants import (
    CHARS_PER_TOKEN,
    MODEL_PRICING,
    _UNKNOWN_MODEL_PRICING,
)
from truecheck_core.domain.errors import LLMResponseParseError, ProviderError, ValidationError
from truecheck_core.domain.value_objects import (
    Confidence,
    LLMVerdict,
    ModelResponse,
    SuspiciousPart,
)

logger = logging.getLogger(__name__)

MAX_PATTERNS = 5
MAX_SUSPICIOUS_PARTS = 3

# Expected output size relative to the prompt, for pre-call estimates
OUTPUT_TO_INPUT_RATIO = 0.1

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")

SYSTEM_PROMPTS = {
    "pt": "\n".join([
        "Você é um especialista em detecção de texto gerado por IA. Sua tarefa é analisar textos "
        "e determinar se foram escritos por humanos ou gerados por inteligência artificial.",
        "",
        "RETORNE APENAS UM JSON VÁLIDO com esta estrutura exata:",
        "{",
        '  "score": number (0-100, onde 100 = definitivamente IA),',
        '  "confidence": "HIGH" | "MEDIUM" | "LOW",',
        '  "reasoning": "string (explicação concisa em português)",',
        '  "patterns": ["string", "string"] (max 5 padrões específicos encontrados),',
        '  "suspiciousParts": [',
        '    {"text": "trecho suspeito", "reason": "motivo", "score": number}',
        "  ] (max 3)",
        "}",
        "",
        "Indicadores de texto gerado por IA:",
        "- Estrutura muito organizada e previsível",
        '- Uso excessivo de conectores formais ("além disso", "portanto", "em conclusão")',
        "- Linguagem artificial sem personalidade",
        "- Listas numeradas frequentes",
        "- Frases com comprimento muito uniforme",
        "- Vocabulário repetitivo",
        "- Ausência de opinião pessoal ou experiência",
        "- Padrões de escrita robóticos",
    ]),
    "en": "\n".join([
        "You are an expert in AI-generated text detection. Your task is to analyze texts "
        "and determine if they were written by humans or generated by artificial intelligence.",
        "",
        "RETURN ONLY A VALID JSON with this exact structure:",
        "{",
        '  "score": number (0-100, where 100 = definitely AI),',
        '  "confidence": "HIGH" | "MEDIUM" | "LOW",',
        '  "reasoning": "string (concise explanation in English)",',
        '  "patterns": ["string", "string"] (max 5 specific patterns found),',
        '  "suspiciousParts": [',
        '    {"text": "suspicious excerpt", "reason": "reason", "score": number}',
        "  ] (max 3)",
        "}",
        "",
        "AI-generated text indicators:",
        "- Overly organized and predictable structure",
        '- Excessive use of formal connectors ("furthermore", "therefore", "in conclusion")',
        "- Artificial language without personality",
        "- Frequent numbered lists",
        "- Very uniform sentence length",
        "- Repetitive vocabulary",
        "- Absence of personal opinion or experience",
        "- Robotic writing patterns",
    ]),
}

_USER_PROMPTS = {
    "pt": 'Analise este texto:\n\n"{text}"',
    "en": 'Analyze this text:\n\n"{text}"',
}


def model_pricing(model_name: str) -> dict[str, float]:
    """USD per 1M tokens for a model (unknown models use the fallback rate)"""
    return MODEL_PRICING.get(model_name, _UNKNOWN_MODEL_PRICING)


def cost_for_tokens(model_name: str, input_tokens: int, output_tokens: int) -> float:
    pricing = model_pricing(model_name)
    return (input_tokens * pricing["input"] + output_tokens * pricing["output"]) / 1_000_000


def extract_json_object(raw: str) -> dict:
    """
    Extract the first well-formed JSON object from a model response

    Code fences and commentary around the object are tolerated.

    Raises:
        LLMResponseParseError: If no JSON object can be decoded
    """
    text = raw.strip()
    candidates = []
    match = _FENCE_RE.search(text)
    if match:
        candidates.append(match.group(1))
    candidates.append(text)

    decoder = json.JSONDecoder()
    for candidate in candidates:
        start = candidate.find("{")
        while start != -1:
            try:
                obj, _ = decoder.raw_decode(candidate, start)
            except json.JSONDecodeError:
                start = candidate.find("{", start + 1)
                continue
            if isinstance(obj, dict):
                return obj
            start = candidate.find("{", start + 1)

    raise LLMResponseParseError(f"No JSON object in model response ({len(text)} chars)")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_score(value, field_name: str) -> int:
    if not _is_number(value):
        raise LLMResponseParseError(f"'{field_name}' must be a number, got {type(value).__name__}")
    if not 0 <= value <= 100:
        raise LLMResponseParseError(f"'{field_name}' out of range 0-100: {value}")
    return int(round(value))


def _parse_patterns(value) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise LLMResponseParseError("'patterns' must be a list")
    patterns = [p.strip() for p in value if isinstance(p, str) and p.strip()]
    return tuple(patterns[:MAX_PATTERNS])


def _parse_suspicious_parts(value, default_score: int) -> tuple[SuspiciousPart, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise LLMResponseParseError("'suspiciousParts' must be a list")
    parts = []
    for item in value:
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        reason = item.get("reason")
        score = item.get("score", default_score)
        if not _is_number(score) or not 0 <= score <= 100:
            continue
        parts.append(SuspiciousPart(
            text=text.strip(),
            score=int(round(score)),
            reason=reason.strip() if isinstance(reason, str) else "",
        ))
    return tuple(parts[:MAX_SUSPICIOUS_PARTS])


def parse_verdict(raw: str) -> dict:
    """
    Validate a model response against the verdict schema

    Returns:
        dict with score, confidence, explanation, indicators, suspicious_parts

    Raises:
        LLMResponseParseError: On any missing or malformed required field
    """
    data = extract_json_object(raw)

    if "score" not in data:
        raise LLMResponseParseError("Missing required field 'score'")
    score = _parse_score(data["score"], "score")

    confidence_raw = data.get("confidence")
    if not isinstance(confidence_raw, str):
        raise LLMResponseParseError("Missing required field 'confidence'")
    try:
        confidence = Confidence(confidence_raw.strip().upper())
    except ValueError:
        raise LLMResponseParseError(f"Invalid confidence: {confidence_raw!r}") from None

    reasoning = data.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        raise LLMResponseParseError("Missing required field 'reasoning'")

    return {
        "score": score,
        "confidence": confidence,
        "explanation": reasoning.strip(),
        "indicators": _parse_patterns(data.get("patterns")),
        "suspicious_parts": _parse_suspicious_parts(data.get("suspiciousParts"), score),
    }


class LLMAnalyzer:
    """
    Analyzer that uses a chat model as the primary detector

    Raises ProviderError (or its LLMResponseParseError subclass) on any failure;
    the caller decides whether to fall back.
    """

    def __init__(self, client: ModelClient, config: LLMConfig | None = None) -> None:
        self._client = client
        self.config = config or LLMConfig()

    @property
    def client(self) -> ModelClient:
        return self._client

    @property
    def model_name(self) -> str:
        return getattr(self._client, "model_name", self.config.model)

    def build_prompts(self, text: str, language: str) -> tuple[str, str]:
        """Return (system_prompt, user_prompt) for the language"""
        if language not in SYSTEM_PROMPTS:
            raise ValidationError(f"Unsupported language: {language}")
        return SYSTEM_PROMPTS[language], _USER_PROMPTS[language].format(text=text)

    def estimate_cost(self, text: str, language: str = "en") -> float:
        """
        Pre-call cost estimate in USD

        Prompt tokens are estimated from characters; the answer is assumed
        to be a tenth of the prompt.
        """
        system_prompt, user_prompt = self.build_prompts(text, language)
        input_tokens = (len(system_prompt) + len(user_prompt)) // CHARS_PER_TOKEN
        output_tokens = int(input_tokens * OUTPUT_TO_INPUT_RATIO)
        return cost_for_tokens(self.model_name, input_tokens, output_tokens)

    def analyze(self, text: str, language: str) -> LLMVerdict:
        """
        Ask the model for a verdict on the text

        Args:
            text: Input text (already length-validated)
            language: "pt" or "en"

        Returns:
            LLMVerdict

        Raises:
            ProviderError: Network, timeout, non-2xx or empty response
            LLMResponseParseError: The response does not match the verdict schema
        """
        system_prompt, user_prompt = self.build_prompts(text, language)
        try:
            response = self._client.generate(user_prompt, system_prompt=system_prompt)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"LLM call failed: {type(e).__name__}: {e}") from e
        parsed = parse_verdict(response.output)
        tokens_used, cost = self._usage(response, system_prompt, user_prompt)

        logger.debug(
            "LLM verdict: model=%s text_len=%d response_len=%d latency_ms=%d tokens=%d",
            response.model_name, len(text), len(response.output), response.latency_ms, tokens_used,
        )

        return LLMVerdict(
            score=parsed["score"],
            confidence=parsed["confidence"],
            explanation=parsed["explanation"],
            indicators=parsed["indicators"],
            suspicious_parts=parsed["suspicious_parts"],
            tokens_used=tokens_used,
            estimated_cost_usd=cost,
            model_name=response.model_name,
        )

    def _usage(self, response: ModelResponse, system_prompt: str, user_prompt: str) -> tuple[int, float]:
        """Token count and cost from usage metadata, else estimated from characters"""
        input_tokens = response.input_tokens
        output_tokens = response.output_tokens
        if not input_tokens and not output_tokens:
            input_tokens = (len(system_prompt) + len(user_prompt)) // CHARS_PER_TOKEN
            output_tokens = len(response.output) // CHARS_PER_TOKEN
        model = response.model_name or self.model_name
        return input_tokens + output_tokens, cost_for_tokens(model, input_tokens, output_tokens)
