from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slotbook.core.config import settings
from slotbook.core.clock import SystemClock
from slotbook.api import auth, bookings
from slotbook.core.logger import setup_logging, logger
from slotbook.services.db_service import build_store
from contextlib import asynccontextmanager
from datetime import datetime

setup_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} ({settings.STORAGE_BACKEND} storage)")
    app.state.store = build_store(settings)
    app.state.clock = SystemClock()
    await app.state.store.connect()
    yield
    # Shutdown
    await app.state.store.close()
    logger.info("🛑 Shutting down backend")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan
)

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"🔥 UNHANDLED ERROR: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "An unexpected error occurred. Please try again."}
    )

app.include_router(auth.router, tags=["Auth"])
app.include_router(bookings.router, tags=["Bookings"])

@app.get("/")
async def health_check():
    return {'status': 'active', 'time': datetime.now().isoformat()}

@app.get("/health")
async def health_check_std():
    return {"status": "ok", "environment": settings.ENVIRONMENT, "timestamp": datetime.now().isoformat()}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("slotbook.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
