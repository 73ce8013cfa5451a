from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blueprint.config import settings
from blueprint.errors import BlueprintError, InternalError, RateLimitedError
from blueprint.models.responses import (
    AnalyzeRequest,
    AnalyzeResponse,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
)
from blueprint.services.logger import logger
from blueprint.tools.chat import ChatService, chat_service
from blueprint.workflows.pipeline import Pipeline, normalize_handle, pipeline

VERSION = "1.0.0"

app = FastAPI(title="Persona Blueprint API", version=VERSION)

# Allow CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def get_pipeline() -> Pipeline:
    return pipeline

def get_chat_service() -> ChatService:
    return chat_service

def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"

@app.exception_handler(BlueprintError)
async def blueprint_error_handler(request: Request, exc: BlueprintError):
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.debug(f"Rejected request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="Invalid request body", code="INVALID_REQUEST").model_dump(),
    )

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=InternalError().to_dict())

@app.get("/api/status")
async def get_status():
    return {"status": "ok", "version": VERSION}

@app.post("/api/analyze", response_model=AnalyzeResponse, responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, 503: {"model": ErrorResponse}})
async def analyze(req: AnalyzeRequest, request: Request, pipeline: Pipeline = Depends(get_pipeline)):
    return await pipeline.run(req.handle, client_ip(request))

@app.post("/api/chat", response_model=ChatResponse, responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, 503: {"model": ErrorResponse}})
async def chat(
    req: ChatRequest,
    request: Request,
    pipeline: Pipeline = Depends(get_pipeline),
    chat_service: ChatService = Depends(get_chat_service),
):
    handle = normalize_handle(req.handle)
    pipeline.admit(client_ip(request))
    reply = await chat_service.reply(handle, req.persona, req.messages)
    return ChatResponse(reply=reply)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
