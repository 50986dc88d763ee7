"""Shared fixtures: fake HTTP session, agent cards and a registry in a temp directory."""

import sys
from pathlib import Path

import pytest
import requests

repo_root = Path(__file__).resolve().parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from a2a_bridge.agent_client import A2AClient
from a2a_bridge.agent_registry import A2ARegistry


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """
    Minimal requests.Session stand-in.

    get() answers from a {url: FakeResponse | Exception} table; post()
    records the request and replies with post_response.
    """

    def __init__(self, cards=None, post_response=None):
        self.cards = dict(cards or {})
        self.post_response = post_response or FakeResponse(200, {"jsonrpc": "2.0", "id": "1", "result": {}})
        self.gets = []
        self.posts = []

    def get(self, url, timeout=None):
        self.gets.append(url)
        response = self.cards.get(url)
        if response is None:
            raise requests.exceptions.ConnectionError(f"Connection refused: {url}")
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, json=None, timeout=None):
        self.posts.append({"url": url, "json": json})
        if isinstance(self.post_response, Exception):
            raise self.post_response
        return self.post_response


def make_card(card_id="Bella", name="Bella", url="https://example.test/agent/rpc", skills=None, **extra):
    card = {
        "name": name,
        "url": url,
        "version": "1.0.0",
        "capabilities": {"streaming": False},
        "skills": [{"id": "special-of-day", "description": "Today's special"}] if skills is None else skills,
    }
    if card_id is not None:
        card["id"] = card_id
    card.update(extra)
    return card


def card_response(card):
    return FakeResponse(200, card)


@pytest.fixture
def bella_card():
    return make_card()


@pytest.fixture
def session(bella_card):
    return FakeSession(cards={
        "https://example.test/agent/.well-known/agent.json": card_response(bella_card),
    })


@pytest.fixture
def client(session):
    return A2AClient(session=session)


@pytest.fixture
def mock_client(session):
    return A2AClient(mock=True, session=session)


@pytest.fixture
def registry_dir(tmp_path):
    return tmp_path / "a2a-servers"


@pytest.fixture
def registry(registry_dir, client):
    reg = A2ARegistry(registry_dir, client=client)
    reg.init()
    return reg
