"""
モデルクライアントのテスト

RetryMixin._with_retry() のリトライ動作、各 SDK クライアントへの
リクエスト組み立てと ProviderError への変換、
create_client() のファクトリ分岐をテストする。
"""

from unittest.mock import MagicMock, patch

import anthropic
import httpx
import openai
import pytest

from truecheck_core.detector_config import LLMConfig
from truecheck_core.domain.errors import ProviderError
from truecheck_core.infrastructure.model_clients.base import RetryMixin
from truecheck_core.infrastructure.model_clients.claude import ClaudeClient
from truecheck_core.infrastructure.model_clients.factory import create_client
from truecheck_core.infrastructure.model_clients.gemini import GeminiClient
from truecheck_core.infrastructure.model_clients.openai_client import OpenAIClient

_REQUEST = httpx.Request("POST", "https://api.example.com/v1/chat")


def _openai_completion(content: str | None, prompt_tokens: int = 900, completion_tokens: int = 120):
    completion = MagicMock()
    completion.choices = [MagicMock(message=MagicMock(content=content))]
    completion.usage = MagicMock(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    return completion


def _anthropic_message(text: str):
    message = MagicMock()
    message.content = [MagicMock(type="text", text=text)]
    message.usage = MagicMock(input_tokens=800, output_tokens=90)
    return message


class TestRetryMixin:
    """RetryMixin._with_retry() のテスト"""

    def _make_mixin(self, max_retries=3):
        mixin = RetryMixin()
        mixin.max_retries = max_retries
        return mixin

    @patch("truecheck_core.infrastructure.model_clients.base.time.sleep")
    def test_success_on_first_attempt(self, mock_sleep):
        """初回で成功する場合、リトライなしで値を返す"""
        mixin = self._make_mixin()
        fn = MagicMock(return_value="ok")

        assert mixin._with_retry(fn) == "ok"
        fn.assert_called_once()
        mock_sleep.assert_not_called()

    @patch("truecheck_core.infrastructure.model_clients.base.time.sleep")
    def test_success_after_two_failures(self, mock_sleep):
        """2回失敗後、3回目で成功する場合"""
        mixin = self._make_mixin(max_retries=3)
        fn = MagicMock(side_effect=[ValueError("1"), ValueError("2"), "ok"])

        assert mixin._with_retry(fn) == "ok"
        assert fn.call_count == 3
        # 指数バックオフ: sleep(1), sleep(2)
        mock_sleep.assert_any_call(1)
        mock_sleep.assert_any_call(2)

    @patch("truecheck_core.infrastructure.model_clients.base.time.sleep")
    def test_raises_after_all_retries_exhausted(self, mock_sleep):
        """全リトライ失敗時、最後の例外をraiseする"""
        mixin = self._make_mixin(max_retries=2)
        fn = MagicMock(side_effect=[ValueError("1"), ValueError("final")])

        with pytest.raises(ValueError, match="final"):
            mixin._with_retry(fn)
        assert fn.call_count == 2

    def test_single_attempt_does_not_sleep(self):
        """max_retries=1 の場合は1回だけ試行する"""
        mixin = self._make_mixin(max_retries=1)
        fn = MagicMock(side_effect=ValueError("once"))

        with patch("truecheck_core.infrastructure.model_clients.base.time.sleep") as mock_sleep:
            with pytest.raises(ValueError, match="once"):
                mixin._with_retry(fn)
            mock_sleep.assert_not_called()

    def test_max_retries_zero_raises_value_error(self):
        """max_retries=0 の場合、ValueError を即座にraiseする"""
        mixin = self._make_mixin(max_retries=0)
        fn = MagicMock(return_value="ok")

        with pytest.raises(ValueError, match="max_retries must be at least 1"):
            mixin._with_retry(fn)
        fn.assert_not_called()

    @patch("truecheck_core.infrastructure.model_clients.base.time.sleep")
    def test_retryable_exceptions_filter(self, mock_sleep):
        """retryable_exceptions に含まれない例外は即座にraiseされる"""
        mixin = self._make_mixin(max_retries=3)
        fn = MagicMock(side_effect=TypeError("not retryable"))

        with pytest.raises(TypeError, match="not retryable"):
            mixin._with_retry(fn, retryable_exceptions=(ValueError,))
        fn.assert_called_once()
        mock_sleep.assert_not_called()


class TestOpenAIClient:
    """OpenAIClient のテスト"""

    @patch("truecheck_core.infrastructure.model_clients.openai_client.OpenAI")
    def test_request_parameters(self, mock_openai):
        """決定的な判定のため temperature / seed / JSON モードを指定する"""
        sdk = mock_openai.return_value
        sdk.chat.completions.create.return_value = _openai_completion('{"score": 10}')

        client = OpenAIClient("gpt-4o-mini", api_key="sk-test", timeout_seconds=25.0)
        response = client.generate("user prompt", system_prompt="system prompt")

        mock_openai.assert_called_once_with(
            api_key="sk-test", base_url=None, timeout=25.0, max_retries=0
        )
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.0
        assert kwargs["seed"] == 42
        assert kwargs["max_tokens"] == 800
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"] == [
            {"role": "system", "content": "system prompt"},
            {"role": "user", "content": "user prompt"},
        ]

        assert response.output == '{"score": 10}'
        assert response.input_tokens == 900
        assert response.output_tokens == 120
        assert response.model_name == "gpt-4o-mini"

    @patch("truecheck_core.infrastructure.model_clients.openai_client.OpenAI")
    def test_seed_omitted_when_none(self, mock_openai):
        sdk = mock_openai.return_value
        sdk.chat.completions.create.return_value = _openai_completion("{}")

        OpenAIClient("gpt-4o-mini", api_key="sk-test", seed=None).generate("p")
        assert "seed" not in sdk.chat.completions.create.call_args.kwargs

    @patch("truecheck_core.infrastructure.model_clients.openai_client.OpenAI")
    def test_empty_content_raises_provider_error(self, mock_openai):
        mock_openai.return_value.chat.completions.create.return_value = _openai_completion(None)

        with pytest.raises(ProviderError, match="Empty response"):
            OpenAIClient("gpt-4o-mini", api_key="sk-test").generate("p")

    @patch("truecheck_core.infrastructure.model_clients.base.time.sleep")
    @patch("truecheck_core.infrastructure.model_clients.openai_client.OpenAI")
    def test_connection_error_retried_then_wrapped(self, mock_openai, mock_sleep):
        """接続エラーはリトライし、最終的に ProviderError に変換する"""
        create = mock_openai.return_value.chat.completions.create
        create.side_effect = openai.APIConnectionError(request=_REQUEST)

        client = OpenAIClient("gpt-4o-mini", api_key="sk-test", max_retries=2)
        with pytest.raises(ProviderError) as exc_info:
            client.generate("p")

        assert create.call_count == 2
        assert isinstance(exc_info.value.__cause__, openai.APIConnectionError)

    @patch("truecheck_core.infrastructure.model_clients.openai_client.OpenAI")
    def test_bad_request_not_retried(self, mock_openai):
        create = mock_openai.return_value.chat.completions.create
        create.side_effect = openai.BadRequestError(
            "bad request",
            response=httpx.Response(400, request=_REQUEST),
            body=None,
        )

        client = OpenAIClient("gpt-4o-mini", api_key="sk-test", max_retries=3)
        with pytest.raises(ProviderError):
            client.generate("p")
        create.assert_called_once()

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            OpenAIClient("gpt-4o-mini")


class TestClaudeClient:
    """ClaudeClient のテスト"""

    @patch("truecheck_core.infrastructure.model_clients.claude.Anthropic")
    def test_system_prompt_and_usage(self, mock_anthropic):
        sdk = mock_anthropic.return_value
        sdk.messages.create.return_value = _anthropic_message(' {"score": 55} ')

        client = ClaudeClient("claude-haiku-4-5-20251001", api_key="test-key")
        response = client.generate("user prompt", system_prompt="system prompt")

        kwargs = sdk.messages.create.call_args.kwargs
        assert kwargs["system"] == "system prompt"
        assert kwargs["messages"] == [{"role": "user", "content": "user prompt"}]
        assert kwargs["temperature"] == 0.0
        assert response.output == '{"score": 55}'
        assert response.input_tokens == 800
        assert response.output_tokens == 90

    @patch("truecheck_core.infrastructure.model_clients.claude.Anthropic")
    def test_non_text_blocks_ignored(self, mock_anthropic):
        message = _anthropic_message("{}")
        message.content = [MagicMock(type="tool_use")]
        mock_anthropic.return_value.messages.create.return_value = message

        with pytest.raises(ProviderError, match="Empty response"):
            ClaudeClient("claude-haiku-4-5-20251001", api_key="test-key").generate("p")

    @patch("truecheck_core.infrastructure.model_clients.claude.Anthropic")
    def test_api_error_wrapped(self, mock_anthropic):
        mock_anthropic.return_value.messages.create.side_effect = anthropic.APIConnectionError(
            request=_REQUEST
        )
        with pytest.raises(ProviderError):
            ClaudeClient("claude-haiku-4-5-20251001", api_key="test-key").generate("p")

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            ClaudeClient("claude-haiku-4-5-20251001")


class TestGeminiClient:
    """GeminiClient のテスト"""

    @patch("truecheck_core.infrastructure.model_clients.gemini.genai.Client")
    def test_generate(self, mock_genai):
        response = MagicMock()
        response.text = '{"score": 30}'
        response.usage_metadata = MagicMock(prompt_token_count=500, candidates_token_count=60)
        mock_genai.return_value.models.generate_content.return_value = response

        client = GeminiClient("gemini-2.5-flash", project_id="test-project")
        result = client.generate("user prompt", system_prompt="system prompt")

        kwargs = mock_genai.return_value.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["contents"] == "user prompt"
        assert kwargs["config"].system_instruction == "system prompt"
        assert kwargs["config"].response_mime_type == "application/json"
        assert result.output == '{"score": 30}'
        assert result.input_tokens == 500

    def test_missing_project(self, monkeypatch):
        monkeypatch.delenv("GCP_PROJECT_ID", raising=False)
        with pytest.raises(ValueError, match="GCP_PROJECT_ID"):
            GeminiClient("gemini-2.5-flash")


class TestCreateClient:
    """create_client() ファクトリのテスト"""

    def test_default_model_returns_openai_client(self):
        """gpt モデル名の場合、OpenAIClient を返す"""
        client = create_client(LLMConfig(api_key="sk-test"))
        assert isinstance(client, OpenAIClient)
        assert client.model_name == "gpt-4o-mini"
        assert client.seed == 42

    def test_claude_model_returns_claude_client(self):
        """claude モデル名の場合、ClaudeClient を返す"""
        client = create_client(LLMConfig(model="claude-haiku-4-5-20251001", api_key="test-key"))
        assert isinstance(client, ClaudeClient)

    @patch("truecheck_core.infrastructure.model_clients.gemini.genai.Client")
    def test_gemini_model_returns_gemini_client(self, mock_genai):
        """gemini モデル名の場合、GeminiClient を返す"""
        client = create_client(LLMConfig(model="gemini-2.5-flash", project_id="test-project"))
        assert isinstance(client, GeminiClient)
        assert mock_genai.call_args.kwargs["project"] == "test-project"

    def test_settings_forwarded(self):
        config = LLMConfig(api_key="sk-test", temperature=0.1, max_tokens=500, max_retries=2)
        client = create_client(config)
        assert client.temperature == 0.1
        assert client.max_tokens == 500
        assert client.max_retries == 2
