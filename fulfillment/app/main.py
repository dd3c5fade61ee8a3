import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from fulfillment.app.api.v1.router import router as v1_router
from fulfillment.app.core.config import settings
from fulfillment.app.core.errors import AppError, CONTACT_SUPPORT, RESUBMIT
from fulfillment.app.core.log import setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Purchase Order Fulfillment", version="0.1.0")
app.include_router(v1_router, prefix="/v1")


@app.exception_handler(AppError)
async def _handle_app_error(request: Request, exc: AppError):
    log_method = logger.error if exc.http_status >= 500 else logger.warning
    log_method("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.details)
    return JSONResponse(status_code=exc.http_status, content=jsonable_encoder(exc.to_response_payload()))


@app.exception_handler(RequestValidationError)
async def _handle_request_validation(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(
            {
                "error": "validation_error",
                "message": "Invalid request payload",
                "action": RESUBMIT,
                "errors": exc.errors(),
            }
        ),
    )


@app.exception_handler(Exception)
async def _handle_unexpected(request: Request, exc: Exception):
    logger.exception("unexpected error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "system_error", "message": "Unexpected error", "action": CONTACT_SUPPORT},
    )
