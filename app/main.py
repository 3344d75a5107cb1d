import uvicorn

from app.api.auth import FirebaseIdentityVerifier
from app.api.server import create_app
from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.logging.logger import Log
from app.processor.processor import build_upload_dispatcher
from app.providers import build_provider_clients
from app.scan.scanner import build_scanner


def main() -> None:
    """Entry point: initialize pool -> build providers and pipelines -> serve."""
    settings = Settings()
    Log.configure(settings.log_level, debug_mode=settings.debug_mode, environment=settings.app_env)
    init_pool(settings)
    clients = build_provider_clients(settings)

    try:
        app = create_app(
            scanner=build_scanner(settings, clients),
            dispatcher=build_upload_dispatcher(settings, clients),
            clients=clients,
            verifier=FirebaseIdentityVerifier(
                settings.firebase_project_id or settings.gcp_project_id
            ),
            environment=settings.app_env,
            debug_mode=settings.debug_mode,
        )
        uvicorn.run(app, host=settings.api_host, port=settings.api_port)
    finally:
        clients.close()
        close_pool()


if __name__ == "__main__":
    main()
