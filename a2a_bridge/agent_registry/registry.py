"""
A2A server registry: in-memory cache backed by one JSON file per server.

The cache is the fast path; the files are the source of truth on cold start.
Mutations write through to disk before the cache is updated, and
reload_servers() is the only operation that replaces the cache wholesale.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from ..agent_client import A2AClient, agent_card_url
from ..errors import AgentCardValidationError, RegistryStorageError
from ..models import REQUIRED_CARD_FIELDS, AgentCard, RegisteredServer
from ..slug import slugify
from .storage import (
    delete_server,
    ensure_registry_dir,
    list_server_files,
    load_server,
    save_server,
    server_path,
)

logger = logging.getLogger(__name__)

MAX_ID_LENGTH = 20


def validate_card(raw: Any, card_url: str) -> AgentCard:
    """
    Check a fetched agent card for the required A2A fields and parse it.

    Raises:
        AgentCardValidationError: If a required field is missing, null or blank,
            or skills is not a list of skill objects
    """
    if not isinstance(raw, dict):
        raise AgentCardValidationError(card_url, "is not a JSON object.")
    for field in REQUIRED_CARD_FIELDS:
        value = raw.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise AgentCardValidationError(card_url, f'is missing/invalid required field: "{field}"')
    if not isinstance(raw["skills"], list):
        raise AgentCardValidationError(card_url, 'has an invalid "skills" field: not an array.')
    try:
        return AgentCard.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "card"
        raise AgentCardValidationError(
            card_url, f'is missing/invalid required field: "{field}" ({first["msg"]})'
        ) from e


def card_server_id(card: AgentCard) -> str:
    """
    Registration id taken from the card's own id, slugged and bounded.

    Returns "" when the card has no usable id; the caller then generates a
    random one. The display name is never used, so two agents that share a
    name but not an id cannot collide.
    """
    server_id = _slug_card_id(card)
    if server_id:
        logger.info('Using card-supplied id "%s" as registration id "%s"', card.id, server_id)
    elif isinstance(card.id, str) and card.id.strip():
        logger.warning('Card id "%s" slugs to an empty string; a random id will be used', card.id)
    return server_id


def _slug_card_id(card: AgentCard) -> str:
    if isinstance(card.id, str) and card.id.strip():
        return slugify(card.id, MAX_ID_LENGTH)
    return ""


def random_server_id() -> str:
    return uuid.uuid4().hex[:MAX_ID_LENGTH]


def _same_registration(server: RegisteredServer, registration_url: str, card: AgentCard) -> bool:
    return server.registration_url == registration_url and server.card.url == card.url


class A2ARegistry:
    """
    Persists A2A server registrations under a directory, one <id>.json each.

    All public methods hold one lock, so list()/get() never observe a
    half-applied register/remove/reload.
    """

    def __init__(self, registry_dir: str | Path, client: A2AClient | None = None):
        """
        Args:
            registry_dir: Directory holding the record files (created by init())
            client: Client used to fetch agent cards (defaults to a live A2AClient)
        """
        self.registry_dir = Path(registry_dir)
        self.client = client or A2AClient()
        self._cache: dict[str, RegisteredServer] = {}
        self._lock = threading.RLock()

    def init(self) -> None:
        """
        Ensure the registry directory exists, then load every record into the cache.

        Raises:
            RegistryStorageError: If the directory cannot be created
        """
        ensure_registry_dir(self.registry_dir)
        result = self.reload_servers()
        logger.info("Initialized. Loaded %d servers from %s into cache.", result["count"], self.registry_dir)

    def reload_servers(self) -> dict[str, int]:
        """
        Discard the cache and rebuild it from the record files.

        Malformed files are skipped (and logged). If the directory cannot be
        scanned at all the cache ends up empty.

        Returns:
            {"count": number of servers now cached}
        """
        with self._lock:
            try:
                files = list_server_files(self.registry_dir)
            except RegistryStorageError as e:
                logger.error("Failed to reload servers: %s", e)
                self._cache = {}
                return {"count": 0}

            cache: dict[str, RegisteredServer] = {}
            for path in files:
                server = load_server(path)
                if server is None:
                    continue
                key = slugify(server.id)
                if not key:
                    logger.warning("Skipping server file %s: empty id", path)
                    continue
                if key in cache:
                    logger.warning('Duplicate server id "%s" in %s; it replaces an earlier file', key, path)
                cache[key] = server
            self._cache = cache
            logger.info("Reloaded servers. Found %d valid configurations in %s.", len(cache), self.registry_dir)
            return {"count": len(cache)}

    def register(self, registration_url: str) -> RegisteredServer:
        """
        Register an A2A server by URL, fetching its agent card.

        If a server with the derived id is already registered from the same
        URL and its card still points at the same endpoint, the existing
        record is returned unchanged.

        Args:
            registration_url: Base URL of the agent (card at <url>/.well-known/agent.json)

        Returns:
            The new or existing RegisteredServer

        Raises:
            AgentCardFetchError: Card could not be fetched/parsed
            AgentCardValidationError: Card is missing required fields
            RegistryStorageError: Record could not be written
        """
        raw = self.client.fetch_agent_card(registration_url)
        card = validate_card(raw, agent_card_url(registration_url))
        server_id = card_server_id(card)

        with self._lock:
            if server_id:
                existing = self._existing_registration(server_id, registration_url, card)
                if existing:
                    return existing
            else:
                existing = self._find_anonymous_registration(registration_url, card)
                if existing:
                    logger.info(
                        'Card without id from %s already registered as "%s". Returning existing.',
                        registration_url, existing.id,
                    )
                    return existing
                server_id = random_server_id()
                while server_id in self._cache or server_path(self.registry_dir, server_id).exists():
                    server_id = random_server_id()
                logger.info('Card from %s has no usable id; generated registration id "%s"', registration_url, server_id)

            entry = RegisteredServer(
                id=server_id,
                registration_url=registration_url,
                card=card,
                added_at=datetime.now(timezone.utc).isoformat(),
            )
            save_server(self.registry_dir, entry)
            self._cache[server_id] = entry
            logger.info(
                'Registered new server: ID "%s", Name: "%s", SourceURL: %s. Cached.',
                server_id, card.name, registration_url,
            )
            return entry

    def _existing_registration(
        self, server_id: str, registration_url: str, card: AgentCard
    ) -> Optional[RegisteredServer]:
        """Matching record under server_id (cache first, then disk); warns when it is about to be replaced."""
        cached = self._cache.get(server_id)
        if cached and _same_registration(cached, registration_url, card):
            logger.info(
                'Server "%s" (URL: %s, card URL: %s) already registered and cached. Returning existing.',
                server_id, registration_url, card.url,
            )
            return cached

        on_disk = load_server(server_path(self.registry_dir, server_id))
        if on_disk and _same_registration(on_disk, registration_url, card):
            self._cache[server_id] = on_disk
            logger.info('Server "%s" (URL: %s) found on disk and matched. Returning existing.', server_id, registration_url)
            return on_disk

        previous = cached or on_disk
        if previous:
            logger.warning(
                'Server id "%s" was registered from %s (card URL %s); replacing with %s (card URL %s)',
                server_id, previous.registration_url, previous.card.url, registration_url, card.url,
            )
        return None

    def _find_anonymous_registration(self, registration_url: str, card: AgentCard) -> Optional[RegisteredServer]:
        """Earlier registration of an id-less card from the same URL pair (cache, then disk)."""

        def matches(server: RegisteredServer) -> bool:
            return _same_registration(server, registration_url, card) and not _slug_card_id(server.card)

        for server in self._cache.values():
            if matches(server):
                return server
        try:
            files = list_server_files(self.registry_dir)
        except RegistryStorageError as e:
            logger.warning("Could not scan %s for an earlier registration: %s", self.registry_dir, e)
            return None
        for path in files:
            server = load_server(path)
            if server and matches(server):
                self._cache[slugify(server.id)] = server
                return server
        return None

    def get(self, server_id: str) -> Optional[RegisteredServer]:
        """
        Retrieve a server by registration id (slugged before lookup).

        Falls back to the record file if the id is not cached, e.g. a file
        added by hand after the last reload.
        """
        key = slugify(server_id)
        if not key:
            return None
        with self._lock:
            if key in self._cache:
                return self._cache[key]
            server = load_server(server_path(self.registry_dir, key))
            if server is None:
                return None
            if slugify(server.id) != key:
                logger.warning(
                    'Data integrity: file %s.json stores id "%s"; caching it under "%s"',
                    key, server.id, key,
                )
            self._cache[key] = server
            return server

    def list(self) -> list[RegisteredServer]:
        """List cached servers. Call reload_servers() first for an up-to-date view of disk."""
        with self._lock:
            return list(self._cache.values())

    def entries(self) -> list[tuple[str, RegisteredServer]]:
        """
        Cached servers with the key get() resolves them by.

        The key differs from server.id only for a record file whose stored
        id disagrees with its file name.
        """
        with self._lock:
            return list(self._cache.items())

    def remove(self, server_id: str) -> bool:
        """
        Remove a server registration from disk and cache.

        Returns:
            True if it was found in either place and removed, False if unknown

        Raises:
            RegistryStorageError: If the record file exists but cannot be deleted
        """
        key = slugify(server_id)
        if not key:
            return False
        with self._lock:
            in_cache = key in self._cache
            on_disk = server_path(self.registry_dir, key).exists()
            if not in_cache and not on_disk:
                logger.info('Attempted to remove server ID "%s", but it was not found.', key)
                return False
            if on_disk:
                delete_server(self.registry_dir, key)
            self._cache.pop(key, None)
            where = "disk and cache" if on_disk and in_cache else ("disk" if on_disk else "cache")
            logger.info('Removed server ID "%s" from %s.', key, where)
            return True
