"""Long-lived provider client handles, built once per process."""

from dataclasses import dataclass, field

import httpx
from google.cloud import storage as gcs
from google.cloud import translate_v3
from google.cloud import vision as gvision

from app.config.settings import Settings
from app.logging.logger import Log


@dataclass
class ProviderClients:
    """Shared SDK handles injected into adapters.

    A handle that failed to initialize is None and its error is kept in
    ``init_errors`` for the diagnostics endpoint.
    """

    http: httpx.Client
    vision: gvision.ImageAnnotatorClient | None = None
    translation: translate_v3.TranslationServiceClient | None = None
    storage: gcs.Client | None = None
    project_id: str = ""
    init_errors: dict[str, str] = field(default_factory=dict)

    def close(self) -> None:
        self.http.close()


def build_provider_clients(settings: Settings) -> ProviderClients:
    """Construct every provider handle, recording failures instead of raising."""
    clients = ProviderClients(
        http=httpx.Client(follow_redirects=True),
        project_id=settings.gcp_project_id,
    )

    try:
        clients.vision = gvision.ImageAnnotatorClient()
    except Exception as exc:
        clients.init_errors["vision"] = str(exc)
        Log.error(f"Failed to initialize Vision client: {exc}")

    try:
        clients.translation = translate_v3.TranslationServiceClient()
    except Exception as exc:
        clients.init_errors["translation"] = str(exc)
        Log.error(f"Failed to initialize Translation client: {exc}")

    try:
        clients.storage = gcs.Client(project=settings.gcp_project_id or None)
    except Exception as exc:
        clients.init_errors["storage"] = str(exc)
        Log.error(f"Failed to initialize Storage client: {exc}")

    return clients
