# api.py
from dotenv import load_dotenv
load_dotenv()
import os
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import Settings, load_settings
from src.constants.messages import INTERNAL_ERROR, MISSING_DRUG_NAMES
from src.logging_setup import setup_logging
from src.models import DrugInteraction, DrugPairRequest, ErrorResponse
from src.services.interactions import InteractionResolver
from src.services.store import build_store

logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    settings: Optional[Settings] = None,
    resolver: Optional[InteractionResolver] = None,
    configure_logging: bool = False,
) -> FastAPI:
    settings = settings or load_settings()
    if resolver is None:
        resolver = InteractionResolver(build_store(settings), settings.resolver)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logging:
            setup_logging(settings.log_level, json=settings.log_json)
        yield

    app = FastAPI(title="Drug Interaction Lookup API", version="0.3.0", lifespan=lifespan)
    app.state.resolver = resolver

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ----------------------------
    # Error handling
    # ----------------------------
    @app.exception_handler(RequestValidationError)
    async def malformed_request(request: Request, exc: RequestValidationError):
        # invalid JSON or non-string names; never echo parser detail to the caller
        logger.warning("malformed_request_body", path=request.url.path, detail=str(exc))
        return _error(500, INTERNAL_ERROR)

    # ----------------------------
    # Routes
    # ----------------------------
    @app.get("/")
    def root():
        return {"message": "Drug Interaction Lookup API is running"}

    @app.get("/health")
    def health():
        return {"ok": True, "sources": list(app.state.resolver.config.sources)}

    @app.post(
        "/api/drug-interaction",
        response_model=DrugInteraction,
        response_model_exclude_none=True,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def check_drug_interaction(body: DrugPairRequest):
        drug1 = (body.drug1 or "").strip()
        drug2 = (body.drug2 or "").strip()
        if not drug1 or not drug2:
            return _error(400, MISSING_DRUG_NAMES)

        try:
            result = app.state.resolver.resolve_interaction(drug1, drug2)
        except Exception:
            logger.exception("drug_interaction_check_failed", drug1=drug1, drug2=drug2)
            return _error(500, INTERNAL_ERROR)

        # callers always get their own spelling back, not the stored one
        return result.model_copy(update={"drug1": drug1, "drug2": drug2})

    return app


app = create_app(configure_logging=True)


# Local run
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
