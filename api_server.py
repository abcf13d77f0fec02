from __future__ import annotations  # FastAPI server brokering interview sessions

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api import media_tokens, routes, uploads
from api.schemas import HealthResp
from completion_client import CompletionClient
from config import Settings, route_from_settings, settings as default_settings
from services.sessions import SessionRegistry


logger = logging.getLogger(__name__)


def create_app(
    cfg: Optional[Settings] = None,
    *,
    completion_client: Optional[CompletionClient] = None,
    registry: Optional[SessionRegistry] = None,
) -> FastAPI:  # Wire settings, completion client and registry into one app
    cfg = cfg or default_settings
    client = completion_client or CompletionClient(route_from_settings(cfg), api_key=cfg.CEREBRAS_API_KEY)
    sessions = registry or SessionRegistry(
        client,
        first_question_delay_s=cfg.FIRST_QUESTION_DELAY_S,
        max_questions=cfg.MAX_QUESTIONS,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Interview broker starting; LiveKit URL: %s", cfg.LIVEKIT_URL or "<unset>")
        try:
            yield
        finally:
            sessions.close_all()
            if completion_client is None:
                client.close()

    app = FastAPI(title="Interview Session Broker", lifespan=lifespan)
    app.state.settings = cfg
    app.state.completion_client = client
    app.state.registry = sessions

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):  # Log every API request with its duration
        start = time.time()
        response = await call_next(request)
        logger.info(
            "API request method=%s path=%s status=%s ms=%d",
            request.method,
            request.url.path,
            response.status_code,
            int((time.time() - start) * 1000),
        )
        return response

    app.include_router(uploads.router)
    app.include_router(media_tokens.router)
    app.include_router(routes.router)

    @app.get("/health", response_model=HealthResp)
    def health_check() -> HealthResp:
        return HealthResp(status="OK", timestamp=datetime.now(timezone.utc))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)
