from __future__ import annotations  # FastAPI server exposing the interview lifecycle

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import router
from interview.controller import InterviewController


logger = logging.getLogger(__name__)


def create_app(controller: Optional[InterviewController] = None) -> FastAPI:  # Build the app; controller is built lazily when omitted
    app = FastAPI(title="Interview Bot API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.controller = controller

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:  # Malformed bodies are client errors
        logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"detail": "Invalid request body"})

    app.include_router(router)
    return app


app = create_app()
