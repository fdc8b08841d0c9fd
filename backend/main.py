import os
import sys
import logging
import time
import traceback

# Ensure this directory is in the path when launched from elsewhere
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import ENVIRONMENT, FRONTEND_URL, PORT, is_production
from database import init_db
from routes.auth_routes import router as auth_router
from routes.user_routes import router as user_router
from routes.habit_routes import router as habit_router
from routes.workout_routes import router as workout_router
from routes.health_routes import router as health_router

logger = logging.getLogger(__name__)

# Initialize db configuration
try:
    init_db()
except Exception as e:
    logger.error(f"Database init failed: {e}")

app = FastAPI(title="Habit & Gym Tracker API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    if ENVIRONMENT == "development":
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report body/query validation failures as plain 400s with a readable message."""
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"detail": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}\n{traceback.format_exc()}")
    content = {"detail": "Internal server error"}
    if not is_production():
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


app.include_router(auth_router)
app.include_router(user_router)
app.include_router(habit_router)
app.include_router(workout_router)
app.include_router(health_router)


@app.get("/")
async def root():
    return {"status": "Habit & Gym Tracker API is running", "health": "/api/v1/health"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=PORT, reload=not is_production())
