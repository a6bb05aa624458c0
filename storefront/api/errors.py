import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from storefront.domain.exceptions import StorefrontException

logger = logging.getLogger(__name__)

def error_body(message: str, details=None) -> dict:
    body = {"error": message}
    if details:
        body["details"] = details
    return body

async def storefront_exception_handler(request: Request, exc: StorefrontException):
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"{exc.__class__.__name__}: {exc.message}",
        extra={"extra_fields": {"path": request.url.path, "status_code": exc.status_code}},
    )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(error_body(exc.message, exc.details)))

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)), headers=exc.headers)

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=error_body("Invalid request data", details))

async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=error_body("Internal server error"))

def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontException, storefront_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
