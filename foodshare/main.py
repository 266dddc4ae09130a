import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from foodshare.database import init_db
from foodshare.routes import follows, listings, users

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_SESSION_SECRET = "foodshare-dev-secret"
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", DEFAULT_SESSION_SECRET)
if SESSION_SECRET_KEY == DEFAULT_SESSION_SECRET:
    logger.warning("SESSION_SECRET_KEY is not set; using the development secret")

app = FastAPI(title="Foodshare API")

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Server-side identity lives in a signed cookie session
app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET_KEY, same_site="lax")


# Every failure body is {"error": "..."}, including framework-level ones
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request.") if errors else "Invalid request."
    return JSONResponse(status_code=400, content={"error": f"Malformed request: {message}"})


app.include_router(users.router, prefix="/api", tags=["users"])
app.include_router(listings.router, prefix="/api", tags=["listings"])
app.include_router(follows.router, prefix="/api", tags=["follows"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("Registered %d routes", len(app.routes))


@app.get("/api/health")
def health_check():
    return {"app_name": "Foodshare API", "status": "healthy"}
