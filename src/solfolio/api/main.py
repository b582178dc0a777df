import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from solfolio.api.burn import router as burn_router
from solfolio.api.nfts import router as nfts_router
from solfolio.api.portfolio import router as portfolio_router
from solfolio.api.summary import router as summary_router
from solfolio.container import Container, close_http_clients

logger = logging.getLogger("solfolio.api")

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    yield
    await close_http_clients(container)


app = FastAPI(title="Solfolio", version=VERSION, lifespan=lifespan)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": "Failed to process request"})


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(portfolio_router)
app.include_router(nfts_router)
app.include_router(burn_router)
app.include_router(summary_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": VERSION}
