"""Redis key layout."""

INSTALLATIONS_KEY = "installations"
WEBHOOK_EVENTS_KEY = "webhook_events"


def installation_key(installation_id: str) -> str:
    return installation_id


def token_key(installation_id: str) -> str:
    return f"token:{installation_id}"


def resource_key(installation_id: str, resource_id: str) -> str:
    return f"{installation_id}:resource:{resource_id}"


def resource_index_key(installation_id: str) -> str:
    return f"{installation_id}:resources"


def project_key(project_id: str) -> str:
    return f"project:{project_id}"
