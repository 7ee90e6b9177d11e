import json

import pytest

from relay_core.config.relay_config import RelayConfig


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="", invalid_json=False):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = text
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise json.JSONDecodeError("Expecting value", self.text, 0)
        return self._payload


def candidate_payload(text):
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": "STOP",
            }
        ],
        "usageMetadata": {"promptTokenCount": 5, "candidatesTokenCount": 2, "totalTokenCount": 7},
    }


class FakeHttp:
    """记录所有 post 调用，并返回预设响应或抛出预设异常。"""

    def __init__(self):
        self.response = FakeResponse(payload=candidate_payload("ok"))
        self.error = None
        self.calls = []
        self.client_kwargs = []

    def post(self, url, **kw):
        self.calls.append({"url": url, **kw})
        if self.error is not None:
            raise self.error
        return self.response

    def respond(self, **kw):
        self.response = FakeResponse(**kw)

    def respond_with_text(self, text):
        self.response = FakeResponse(payload=candidate_payload(text))

    @property
    def last_prompt(self):
        return self.calls[-1]["json"]["contents"][0]["parts"][0]["text"]


@pytest.fixture
def fake_http(monkeypatch):
    http = FakeHttp()

    class Client:
        def __init__(self, *a, **kw):
            http.client_kwargs.append(kw)

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def post(self, url, **kw):
            return http.post(url, **kw)

    class AsyncClient:
        def __init__(self, *a, **kw):
            http.client_kwargs.append(kw)

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def post(self, url, **kw):
            return http.post(url, **kw)

    monkeypatch.setattr("httpx.Client", Client)
    monkeypatch.setattr("httpx.AsyncClient", AsyncClient)
    return http


@pytest.fixture
def relay_config():
    return RelayConfig(
        endpoint="https://example.test/v1beta/",
        api_key="test-key-123456",
        timeout=5.0,
        model="gemini-test",
    )
