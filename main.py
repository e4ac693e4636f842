import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import settings
from routes.progress_routes import router as progress_router
from routes.stroke_routes import router as stroke_router
from services.stroke_scorer import InvalidInputError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# -----------------------------
app = FastAPI(
    title="Umwero Stroke Practice Backend",
    description="API for scoring Umwero character drawings and tracking learner progress",
    version="1.0.0"
)

# --- REGISTER ROUTERS ---
app.include_router(stroke_router)
app.include_router(progress_router)

# --- CORS MIDDLEWARE ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    logger.warning("Invalid stroke input on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"ok": False, "error": str(exc)})

# -----------------------------
# ROOT ENDPOINTS
@app.get("/")
def read_root():
    return {"message": "Welcome to the Umwero stroke practice backend!", "docs": "/docs"}

@app.get("/health")
def health_check():
    return {"status": "healthy"}
