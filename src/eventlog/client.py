"""Event logging client.

``EventLogger`` holds the configuration and a transport. Every call site that
needs analytics receives the same instance (or uses the process default from
``get_event_logger``), so configuration is set once at startup and read on
every event.
"""

from __future__ import annotations

import logging
import platform
import sys
import threading
from typing import Any, Optional

from eventlog.config import LoggerConfig, is_ci_environment, is_tracking_enabled
from eventlog.transport import EventTransport, PostHogTransport

logger = logging.getLogger(__name__)


def _get_eventlog_version() -> str:
    """Get eventlog version string."""
    try:
        from eventlog import __version__

        return __version__
    except Exception:
        return "unknown"


def _get_system_properties() -> dict:
    """Get system properties for events.

    Returns:
        Dictionary of system properties
    """
    return {
        "os": platform.system(),
        "os_version": platform.release(),
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "eventlog_version": _get_eventlog_version(),
        "is_ci": is_ci_environment(),
    }


class EventLogger:
    """Configured façade over an analytics transport.

    Configuration reads and writes go through a lock, and ``log_event`` merges
    from a snapshot of the default properties, so concurrent writers cannot
    break a log call. Which of two racing writes wins is not defined.
    """

    def __init__(
        self,
        config: Optional[LoggerConfig] = None,
        transport: Optional[EventTransport] = None,
    ):
        self.config = config if config is not None else LoggerConfig()
        self.transport = transport if transport is not None else PostHogTransport(self.config)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Configuration accessors
    # ------------------------------------------------------------------

    @property
    def project_token(self) -> Optional[str]:
        with self._lock:
            return self.config.project_token

    @project_token.setter
    def project_token(self, value: Optional[str]) -> None:
        with self._lock:
            self.config.project_token = value
        self._reset_transport()

    @property
    def shared_container_identifier(self) -> Optional[str]:
        with self._lock:
            return self.config.shared_container_identifier

    @shared_container_identifier.setter
    def shared_container_identifier(self, value: Optional[str]) -> None:
        with self._lock:
            self.config.shared_container_identifier = value
        self._reset_transport()

    @property
    def default_properties(self) -> dict[str, Any]:
        with self._lock:
            return dict(self.config.default_properties)

    @default_properties.setter
    def default_properties(self, value: Optional[dict[str, Any]]) -> None:
        with self._lock:
            self.config.default_properties = dict(value) if value else {}

    def register(self, **properties: Any) -> None:
        """Add properties to the defaults sent with every event."""
        with self._lock:
            self.config.default_properties = {**self.config.default_properties, **properties}

    def unregister(self, *keys: str) -> None:
        """Remove properties from the defaults."""
        with self._lock:
            self.config.default_properties = {
                k: v for k, v in self.config.default_properties.items() if k not in keys
            }

    def _reset_transport(self) -> None:
        reset = getattr(self.transport, "reset", None)
        if reset is not None:
            reset()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def is_enabled(self) -> bool:
        return self.config.enabled and is_tracking_enabled()

    def log_event(self, name: str, properties: Optional[dict[str, Any]] = None) -> None:
        """Log an analytics event.

        Default properties are merged under the call-site properties, so a
        key given here overrides the default with the same key. This never
        raises; delivery problems are the transport's concern.

        Args:
            name: Name of the event (e.g., "document_opened")
            properties: Optional event properties
        """
        try:
            if not self.is_enabled():
                return

            with self._lock:
                defaults = dict(self.config.default_properties)
                include_system = self.config.include_system_properties

            event_properties: dict[str, Any] = _get_system_properties() if include_system else {}
            event_properties.update(defaults)
            if properties:
                event_properties.update(properties)

            self.transport.send(name, event_properties)

        except Exception as e:
            logger.debug(f"Failed to log event {name}: {e}")

    def distinct_identifier(self) -> str:
        """Get the identifier events from this installation are attributed to.

        Returns:
            Opaque identifier string, or "" if the transport could not supply one
        """
        try:
            return self.transport.identifier()
        except Exception as e:
            logger.debug(f"Failed to read distinct identifier: {e}")
            return ""

    def flush(self) -> None:
        """Ask the transport to deliver anything it has queued."""
        try:
            self.transport.flush()
        except Exception as e:
            logger.debug(f"Error flushing events: {e}")


# Process default logger (lazy initialized)
_default_logger: EventLogger | None = None
_default_lock = threading.Lock()


def configure(
    transport: Optional[EventTransport] = None,
    **settings: Any,
) -> EventLogger:
    """Create the process default logger.

    Settings from the environment are read first and then overridden by the
    keyword arguments, which accept any LoggerConfig field.

    Args:
        transport: Optional transport (defaults to PostHog)
        **settings: LoggerConfig field overrides

    Returns:
        The new default EventLogger

    Raises:
        pydantic.ValidationError: If a keyword is not a LoggerConfig field
    """
    global _default_logger

    config = LoggerConfig(**{**LoggerConfig.from_env().model_dump(), **settings})

    event_logger = EventLogger(config, transport=transport)
    with _default_lock:
        previous, _default_logger = _default_logger, event_logger

    if previous is not None:
        previous.flush()
    return event_logger


def get_event_logger() -> EventLogger:
    """Get or create the process default logger.

    Returns:
        The default EventLogger instance
    """
    global _default_logger

    if _default_logger is not None:
        return _default_logger

    with _default_lock:
        if _default_logger is None:
            _default_logger = EventLogger(LoggerConfig.from_env())
        return _default_logger


def log_event(name: str, properties: Optional[dict[str, Any]] = None) -> None:
    """Log an event through the default logger."""
    get_event_logger().log_event(name, properties)


def distinct_identifier() -> str:
    """Get the distinct identifier from the default logger."""
    return get_event_logger().distinct_identifier()


def flush() -> None:
    """Flush the default logger."""
    get_event_logger().flush()
