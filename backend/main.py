import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import CHALLENGE_SWEEP_INTERVAL_SECONDS, FRONTEND_URL
from models.loader import load_all_templates
from processing.pipeline import normalize_to_canvas, verify_trace
from schemas.messages import ChallengeResponse, VerificationStage
from schemas.trace import VerifyRequest
from state.ledger import ChallengeLedger

logger = logging.getLogger("uvicorn.error")

# Answered before any geometry runs
CLIENT_ERROR_STAGES = (
    VerificationStage.INVALID_INPUT,
    VerificationStage.TOO_FEW_POINTS,
    VerificationStage.INVALID_CHALLENGE,
)


async def sweep_challenges(ledger: ChallengeLedger, interval: float):
    """Periodically evict abandoned challenges so the ledger stays bounded."""
    while True:
        await asyncio.sleep(interval)
        ledger.sweep()


@asynccontextmanager
async def lifespan(app: FastAPI):
    print("Loading templates...")
    app.state.registry = load_all_templates()
    app.state.ledger = ChallengeLedger()
    sweeper = asyncio.create_task(
        sweep_challenges(app.state.ledger, CHALLENGE_SWEEP_INTERVAL_SECONDS)
    )
    print("All templates loaded. Server ready.")
    yield
    sweeper.cancel()
    try:
        await sweeper
    except asyncio.CancelledError:
        pass


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health(request: Request):
    return {
        "status": "ok",
        "templates_loaded": len(request.app.state.registry.templates),
        "active_challenges": len(request.app.state.ledger),
    }


@app.get("/challenge")
async def new_challenge(request: Request):
    registry = request.app.state.registry
    challenge = request.app.state.ledger.issue(shape=registry.random_name())
    # Only the cosmetic display parameters leave the server, never the template
    return ChallengeResponse(
        challenge_id=challenge.id,
        shape=challenge.shape,
        display_rotation=challenge.display_rotation,
        display_scale=challenge.display_scale,
        expires_at=challenge.expires_at,
    ).model_dump()


@app.post("/verify")
async def verify(body: VerifyRequest, request: Request):
    registry = request.app.state.registry
    ledger = request.app.state.ledger

    challenge = ledger.get(body.challenge_id)
    template = registry.get(challenge.shape if challenge else None)

    stroke = normalize_to_canvas(body.path, body.canvas) if body.path is not None else None
    verdict = await asyncio.to_thread(
        verify_trace, stroke, template, body.challenge_id, ledger
    )

    status_code = 400 if verdict.stage in CLIENT_ERROR_STAGES else 200
    logger.info(f"POST /verify -> {status_code}, stage={verdict.stage.value}, success={verdict.success}")
    return JSONResponse(status_code=status_code, content=verdict.model_dump(mode="json"))


# ──────────────────────────────────────────────
# Run with: uvicorn main:app --reload
# ──────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
