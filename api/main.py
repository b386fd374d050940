import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docket.errors import IllegalTransition, NotFound, StorageFailure, ValidationError
from docket.settings import API_DEBUG, API_HOST, API_PORT

from .compliance import router as compliance_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Docket Compliance API",
    version="0.1.0",
    description="HTTP layer over the compliance registry, task bridge and escalation runs.",
    debug=API_DEBUG,
)

# --- CORS ----------------------------------------------------------
# Dev origins for the practice dashboard; tighten in production.
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


# --- Error mapping -------------------------------------------------
@app.exception_handler(NotFound)
def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(IllegalTransition)
def illegal_transition_handler(request: Request, exc: IllegalTransition):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(StorageFailure)
def storage_failure_handler(request: Request, exc: StorageFailure):
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "record store unavailable"})


# --- Include Routers -----------------------------------------------
app.include_router(compliance_router)


# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "Docket API is alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=API_HOST, port=API_PORT, reload=API_DEBUG)
