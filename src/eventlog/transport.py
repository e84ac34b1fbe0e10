"""Event delivery backends.

The logger never talks to a vendor SDK directly. It hands every event to an
``EventTransport``, so the real PostHog client, a test double or a no-op
backend can be swapped without touching call sites.
"""

from __future__ import annotations

import atexit
import logging
import threading
from typing import Any, Protocol, runtime_checkable

from eventlog.config import LoggerConfig
from eventlog.identity import get_distinct_id

logger = logging.getLogger(__name__)


@runtime_checkable
class EventTransport(Protocol):
    """Delivery capability used by EventLogger."""

    def send(self, name: str, properties: dict[str, Any]) -> None:
        """Hand one event to the delivery backend."""
        ...

    def identifier(self) -> str:
        """Return the distinct identifier events are attributed to."""
        ...

    def flush(self) -> None:
        """Push out anything the backend has queued."""
        ...


class NullTransport:
    """Transport that discards every event."""

    def __init__(self, shared_container_identifier: str | None = None):
        self.shared_container_identifier = shared_container_identifier

    def send(self, name: str, properties: dict[str, Any]) -> None:
        logger.debug(f"Discarding event {name}")

    def identifier(self) -> str:
        return get_distinct_id(self.shared_container_identifier)

    def flush(self) -> None:
        pass


class PostHogTransport:
    """Transport backed by the PostHog Python SDK.

    The SDK client is created lazily on the first event and runs in
    asynchronous mode, so queueing, batching and retries happen on the SDK's
    own consumer thread. A single shutdown hook per transport flushes whichever
    client is current at interpreter exit.
    """

    def __init__(self, config: LoggerConfig):
        self.config = config
        self._client: Any | None = None
        self._client_lock = threading.Lock()
        self._shutdown_registered = False
        self._distinct_id: str | None = None

    def _get_client(self):
        """Get or create the PostHog client (lazy initialization).

        Returns:
            PostHog client instance or None if no token/error
        """
        if self._client is not None:
            return self._client

        if not self.config.project_token:
            logger.debug("No project token configured, events will not be delivered")
            return None

        with self._client_lock:
            if self._client is not None:
                return self._client

            try:
                from posthog import Posthog

                self._client = Posthog(
                    project_api_key=self.config.project_token,
                    host=self.config.host,
                    debug=self.config.debug,
                    sync_mode=False,
                )
            except Exception as e:
                logger.debug(f"Failed to initialize PostHog: {e}")
                return None

            if not self._shutdown_registered:
                atexit.register(self._shutdown)
                self._shutdown_registered = True

            return self._client

    def _shutdown(self) -> None:
        with self._client_lock:
            client, self._client = self._client, None

        if client is not None:
            try:
                client.shutdown()
            except Exception as e:
                logger.debug(f"Error in PostHog shutdown: {e}")

    def reset(self) -> None:
        """Drop the current client so the next event picks up new settings."""
        self._shutdown()
        self._distinct_id = None

    def send(self, name: str, properties: dict[str, Any]) -> None:
        client = self._get_client()
        if client is None:
            return

        client.capture(
            distinct_id=self.identifier(),
            event=name,
            properties=properties,
        )

    def identifier(self) -> str:
        if self._distinct_id is None:
            self._distinct_id = get_distinct_id(self.config.shared_container_identifier)
        return self._distinct_id

    def flush(self) -> None:
        client = self._client
        if client is not None:
            client.flush()
