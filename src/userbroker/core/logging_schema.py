"""Log event types for structured logging."""

from enum import StrEnum


class LogEvent(StrEnum):
    """Log event types for the broker.

    Used with logger.info/warning/error extra dict:
        logger.info("message", extra={"event": LogEvent.INSTANCE_CREATED, ...})
    """

    # Application lifecycle
    APP_STARTED = "app_started"
    APP_STOPPED = "app_stopped"

    # Instance lifecycle
    INSTANCE_CREATED = "instance_created"
    INSTANCE_REMOVED = "instance_removed"
    INSTANCE_BOUND = "instance_bound"
    INSTANCE_UNBOUND = "instance_unbound"
    CREATE_FAILED = "create_failed"
    REMOVE_FAILED = "remove_failed"
    BIND_FAILED = "bind_failed"

    # Compensation
    ROLLBACK_STARTED = "rollback_started"
    ROLLBACK_STEP_FAILED = "rollback_step_failed"
    ROLLBACK_COMPLETED = "rollback_completed"

    # Kubernetes resources
    POD_CREATED = "pod_created"
    POD_DELETED = "pod_deleted"
    SECRET_CREATED = "secret_created"
    SECRET_DELETED = "secret_deleted"
    CREDENTIAL_FALLBACK = "credential_fallback"

    # Error events
    UNHANDLED_EXCEPTION = "unhandled_exception"
    BROKER_ERROR = "broker_error"
