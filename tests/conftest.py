import httpx
import pytest
from fastapi.testclient import TestClient

from prompt_gateway.client import UpstreamClient
from prompt_gateway.config import Settings
from prompt_gateway.server import create_app

UPSTREAM_URL = "https://upstream.test/v1/chat/completions"


class StubUpstream:
    """Records outbound requests and answers them with a responder."""

    def __init__(self, responder):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)


@pytest.fixture
def settings():
    return Settings(
        gpt_model="gpt-x",
        gpt_max_tokens=0,
        gpt_url=UPSTREAM_URL,
        gpt_token='"abc123"',
    )


@pytest.fixture
def completion_body():
    def _body(*choices, model="gpt-x", total_tokens=7):
        return {
            "id": "chatcmpl-1",
            "object": "chat.completion",
            "created": 1700000000,
            "model": model,
            "choices": [
                {
                    "index": i,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": reason,
                }
                for i, (content, reason) in enumerate(choices)
            ],
            "usage": {"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": total_tokens},
        }
    return _body


@pytest.fixture
def gateway(settings):
    """Build a TestClient whose upstream is answered by `responder`."""
    opened = []

    def _gateway(responder):
        stub = StubUpstream(responder)
        app = create_app(
            settings,
            client_factory=lambda s: UpstreamClient(s, transport=httpx.MockTransport(stub)),
        )
        client = TestClient(app)
        client.__enter__()
        opened.append(client)
        return client, stub

    yield _gateway

    for client in opened:
        client.__exit__(None, None, None)
