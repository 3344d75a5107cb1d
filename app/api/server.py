import uuid
from typing import Any

from fastapi import Body, FastAPI, Header, Request, Response
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.auth import BaseIdentityVerifier, bearer_token
from app.api.diagnostics import run_diagnostics
from app.errors.codes import ErrorCode
from app.logging.logger import Log
from app.processor.models import UploadEvent
from app.processor.processor import UploadDispatcher
from app.providers import ProviderClients
from app.scan.exceptions import ScanError
from app.scan.models import ScanRequest
from app.scan.scanner import ContractScanner

HEALTH_CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(
    scanner: ContractScanner,
    dispatcher: UploadDispatcher,
    clients: ProviderClients,
    verifier: BaseIdentityVerifier,
    environment: str = "dev",
    debug_mode: bool = False,
) -> FastAPI:
    """Build the HTTP surface around already-constructed services."""
    app = FastAPI(title="docintel")

    def _scan_error_response(exc: ScanError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_payload(include_details=debug_mode),
        )

    def _bad_body(request_id: str, reason: str) -> ScanError:
        error = ScanError(
            ScanError.INVALID_ARGUMENT,
            ErrorCode.BAD_REQUEST,
            "Request body must be a JSON object.",
            request_id,
            details={"reason": reason},
        )
        Log.operation_error(request_id, "scanContract_validation", error, reason=reason)
        return error

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        if request.url.path != "/scanContract":
            return await request_validation_exception_handler(request, exc)
        return _scan_error_response(_bad_body(str(uuid.uuid4()), str(exc.errors())))

    @app.post("/scanContract")
    def scan_contract(
        payload: Any = Body(default=None),
        authorization: str | None = Header(default=None),
    ) -> JSONResponse:
        request_id = str(uuid.uuid4())
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            return _scan_error_response(_bad_body(request_id, type(payload).__name__))
        # callable clients wrap arguments in {"data": {...}}
        data = payload.get("data") if isinstance(payload.get("data"), dict) else payload

        token = bearer_token(authorization)
        requester_id = verifier.verify(token) if token else None
        try:
            result = scanner.scan(ScanRequest.from_payload(data, requester_id), request_id)
        except ScanError as exc:
            return _scan_error_response(exc)
        return JSONResponse(content=result.to_response())

    @app.post("/events/storage", status_code=204)
    def storage_event(payload: dict[str, Any] | None = Body(default=None)) -> Response:
        event = UploadEvent.from_resource(payload or {})
        if not event.path:
            Log.warning("Storage event without object name ignored")
            return Response(status_code=204)
        dispatcher.dispatch(event)
        return Response(status_code=204)

    @app.options("/healthGoogle")
    def health_google_preflight() -> Response:
        return Response(status_code=204, headers=HEALTH_CORS_HEADERS)

    @app.get("/healthGoogle")
    def health_google() -> JSONResponse:
        status_code, body = run_diagnostics(clients, environment=environment)
        return JSONResponse(status_code=status_code, content=body, headers=HEALTH_CORS_HEADERS)

    return app
