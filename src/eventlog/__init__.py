"""Minimal analytics event logging façade.

This module provides:
- Config: Project token, shared container identifier and default properties
- Client: EventLogger with log_event / distinct_identifier
- Transport: Pluggable delivery backends (PostHog, null)
"""

__version__ = "0.1.0"

from eventlog.client import EventLogger as EventLogger
from eventlog.client import configure as configure
from eventlog.client import distinct_identifier as distinct_identifier
from eventlog.client import flush as flush
from eventlog.client import get_event_logger as get_event_logger
from eventlog.client import log_event as log_event
from eventlog.config import LoggerConfig as LoggerConfig
from eventlog.transport import EventTransport as EventTransport
from eventlog.transport import NullTransport as NullTransport
from eventlog.transport import PostHogTransport as PostHogTransport
