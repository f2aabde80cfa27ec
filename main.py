import logging

from fastapi import FastAPI, Request

from recall.api.endpoints import router
from recall.shared.correlation import CorrelationMiddleware, get_correlation_id
from recall.shared.errors import KnowledgeError, error_response_for, internal_error
from recall.shared.logging_config import setup_logging

# Configure logging
setup_logging()

logger = logging.getLogger("Recall.Main")

app = FastAPI(
    title="Recall Knowledge Service",
    description="Personal knowledge base: indexing and hybrid search",
    version="1.0.0"
)

app.add_middleware(CorrelationMiddleware)
app.include_router(router, prefix="/api/v1")


def _request_correlation_id(request: Request):
    return getattr(request.state, "correlation_id", None) or get_correlation_id()


@app.exception_handler(KnowledgeError)
async def knowledge_error_handler(request: Request, exc: KnowledgeError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return error_response_for(exc, correlation_id=_request_correlation_id(request))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return internal_error(correlation_id=_request_correlation_id(request))


@app.get("/")
async def root():
    return {"message": "Recall Knowledge Service Running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
