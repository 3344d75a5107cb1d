import uuid
from datetime import datetime, timezone
from typing import Any

from app.providers import ProviderClients

_CLIENT_CHECKS: dict[str, str] = {
    "vision": "Vision",
    "translation": "Translation",
    "storage": "Storage",
}


def run_diagnostics(clients: ProviderClients, environment: str = "dev") -> tuple[int, dict[str, Any]]:
    """Report provider client health as ``(http_status, body)``.

    The project id is reported but does not affect the overall result.
    """
    checks: dict[str, dict[str, Any]] = {}
    ok = True
    for name, label in _CLIENT_CHECKS.items():
        if getattr(clients, name) is not None:
            checks[name] = {
                "initialized": True,
                "message": f"{label} client initialized successfully",
            }
        else:
            ok = False
            checks[name] = {
                "initialized": False,
                "error": clients.init_errors.get(name, f"{label} client is not initialized"),
            }

    checks["projectId"] = {
        "value": clients.project_id or "not set",
        "set": bool(clients.project_id),
    }

    body = {
        "ok": ok,
        "requestId": str(uuid.uuid4()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": environment,
        "checks": checks,
    }
    return (200 if ok else 503), body
