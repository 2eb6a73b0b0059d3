from unittest.mock import MagicMock

import pytest
import requests

from archgraph.shared.config.settings import Settings
from archgraph.shared.exceptions import ConfigurationError, UpstreamCallFailure
from archgraph.shared.infrastructure.ai import (
    ChatMessage, LLMProvider, LLMProviderConfig, MessageRole,
    create_model_client, get_model_client_from_settings,
)
from archgraph.shared.infrastructure.ai.openai_compatible import OpenAICompatibleClient

MESSAGES = [
    ChatMessage(role=MessageRole.SYSTEM, content="You edit graphs."),
    ChatMessage(role=MessageRole.USER, content="Add a queue."),
]


def _response(status_code=200, json_data=None, text=""):
    response = MagicMock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = text
    response.json.return_value = json_data
    return response


@pytest.fixture
def openai_client():
    return OpenAICompatibleClient(LLMProviderConfig(api_key="sk-test", base_url="https://llm.example/v1/"))


def test_posts_chat_completion(openai_client, mocker):
    post = mocker.patch.object(
        openai_client.session, "post",
        return_value=_response(json_data={"choices": [{"message": {"content": "{}"}}]}),
    )

    text = openai_client.complete(MESSAGES)

    assert text == "{}"
    args, kwargs = post.call_args
    assert args[0] == "https://llm.example/v1/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["json"]["model"] == "gpt-4o-mini"
    assert kwargs["json"]["temperature"] == 0.7
    assert kwargs["json"]["max_tokens"] == 4096
    assert kwargs["json"]["messages"] == [
        {"role": "system", "content": "You edit graphs."},
        {"role": "user", "content": "Add a queue."},
    ]


def test_non_success_status_is_upstream_failure(openai_client, mocker):
    mocker.patch.object(openai_client.session, "post", return_value=_response(401, text="bad key"))

    with pytest.raises(UpstreamCallFailure) as exc_info:
        openai_client.complete(MESSAGES)

    assert exc_info.value.status_code == 401
    assert "LLM API error (401): bad key" in str(exc_info.value)


@pytest.mark.parametrize("body", [{"choices": []}, {}, {"choices": [{"message": {}}]}])
def test_missing_content_is_upstream_failure(openai_client, mocker, body):
    mocker.patch.object(openai_client.session, "post", return_value=_response(json_data=body))

    with pytest.raises(UpstreamCallFailure, match="No response from LLM"):
        openai_client.complete(MESSAGES)


def test_transport_errors_are_wrapped(openai_client, mocker):
    mocker.patch.object(openai_client.session, "post", side_effect=requests.ConnectionError("refused"))

    with pytest.raises(UpstreamCallFailure) as exc_info:
        openai_client.complete(MESSAGES)

    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


def test_unexpected_errors_are_wrapped(openai_client, mocker):
    mocker.patch.object(openai_client, "_complete", side_effect=RuntimeError("boom"))

    with pytest.raises(UpstreamCallFailure, match="boom"):
        openai_client.complete(MESSAGES)


def test_factory_dispatches_on_provider():
    client = create_model_client(LLMProviderConfig(api_key="k", provider="openai-compatible"))

    assert isinstance(client, OpenAICompatibleClient)
    assert client.provider == LLMProvider.OPENAI_COMPATIBLE.value


def test_factory_builds_gemini_client(mocker):
    from archgraph.shared.infrastructure.ai import gemini

    mocker.patch.object(gemini.genai, "configure")
    client = create_model_client(LLMProviderConfig(api_key="k", provider="gemini", model="gemini-1.5-flash"))

    assert isinstance(client, gemini.GeminiModelClient)
    assert client.provider == "gemini"


def test_gemini_maps_roles_and_returns_text(mocker):
    from archgraph.shared.infrastructure.ai import gemini

    mocker.patch.object(gemini.genai, "configure")
    model = MagicMock()
    model.generate_content.return_value = MagicMock(text='{"addNodes": []}')
    build = mocker.patch.object(gemini.genai, "GenerativeModel", return_value=model)
    client = gemini.GeminiModelClient(LLMProviderConfig(api_key="k", provider="gemini", model="gemini-1.5-flash"))

    text = client.complete(MESSAGES + [ChatMessage(role=MessageRole.ASSISTANT, content="ok")])

    assert text == '{"addNodes": []}'
    assert build.call_args.kwargs["system_instruction"] == "You edit graphs."
    contents = model.generate_content.call_args.args[0]
    assert [c["role"] for c in contents] == ["user", "model"]


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError):
        LLMProviderConfig(api_key="k", provider="carrier-pigeon")


def test_settings_without_key_raise():
    settings = Settings(_env_file=None, LLM_API_KEY=None, GEMINI_API_KEY=None)

    with pytest.raises(ConfigurationError, match="LLM_API_KEY"):
        get_model_client_from_settings(settings)


def test_settings_gemini_without_key_raise():
    settings = Settings(_env_file=None, LLM_PROVIDER="gemini", GEMINI_API_KEY=None)

    with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
        get_model_client_from_settings(settings)


def test_settings_build_configured_client():
    settings = Settings(
        _env_file=None, LLM_API_KEY="sk-live", LLM_BASE_URL="http://localhost:11434/v1", LLM_MODEL="llama3",
    )

    client = get_model_client_from_settings(settings)

    assert isinstance(client, OpenAICompatibleClient)
    assert client.endpoint == "http://localhost:11434/v1/chat/completions"
    assert client.model_name == "llama3"
