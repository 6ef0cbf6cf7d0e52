"""Audit event type definitions."""

from enum import Enum


class EventType(str, Enum):
    """Audit event types."""

    # Key events
    KEY_CREATE = "key.create"
    KEY_IMPORT = "key.import"
    KEY_LIST = "key.list"
    KEY_READ = "key.read"

    # Command events
    COMMAND_UNIMPLEMENTED = "command.unimplemented"

    # System events
    SYS_STARTUP = "system.startup"
