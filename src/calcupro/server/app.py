"""FastAPI application exposing the arithmetic service over HTTP."""
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from calcupro.common.config import ServiceSettings
from calcupro.common.errors import CalculatorError
from calcupro.common.logger import logger
from calcupro.common.operations import (
    CalculationRequest,
    CalculationResult,
    ErrorResponse,
    ExpressionRequest,
    ExpressionResult,
    HealthStatus,
)
from calcupro.server.calculator import ArithmeticService

ERROR_RESPONSES = {400: {"model": ErrorResponse}}


def create_app(settings: Optional[ServiceSettings] = None) -> FastAPI:
    """
    Build the calculator API.

    Routes:
        - ``POST /api/calculate``: single named operation
        - ``POST /api/evaluate``: flat arithmetic expression
        - ``GET /health``: liveness probe

    Every client error, including malformed request bodies, is answered with
    HTTP 400 and an ``{"error": ...}`` body.

    :param ServiceSettings settings: Service settings, read from the environment when omitted

    :return: Configured application
    :rtype: FastAPI
    """
    settings = settings or ServiceSettings.from_env()
    service = ArithmeticService()

    app = FastAPI(
        title="CalcuPro API",
        description="Basic arithmetic operations and restricted expression evaluation.",
    )
    app.state.settings = settings
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CalculatorError)
    async def calculator_error_handler(request: Request, exc: CalculatorError) -> JSONResponse:
        logger.warning(f"⚠️ {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=400, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(f"⚠️ {request.url.path} received a malformed body")
        return JSONResponse(status_code=400, content={"error": "Request body must be a JSON object"})

    @app.get("/health", response_model=HealthStatus)
    def health() -> HealthStatus:
        return HealthStatus(timestamp=datetime.now(timezone.utc))

    @app.post(
        "/api/calculate",
        response_model=CalculationResult,
        response_model_exclude_none=True,
        responses=ERROR_RESPONSES,
    )
    def calculate(body: Optional[CalculationRequest] = None) -> CalculationResult:
        # An empty body is reported field by field, like an empty JSON object
        body = body or CalculationRequest()
        return service.calculate(body.operation, body.operand1, body.operand2)

    @app.post("/api/evaluate", response_model=ExpressionResult, responses=ERROR_RESPONSES)
    def evaluate(body: Optional[ExpressionRequest] = None) -> ExpressionResult:
        body = body or ExpressionRequest()
        return service.evaluate(body.expression)

    return app
