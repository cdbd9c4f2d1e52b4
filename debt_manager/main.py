import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from debt_manager.db import Base, engine
from debt_manager.logging_config import setup_logging
from debt_manager.models.customer import Customer  # noqa: F401  registers the table

from debt_manager.routes.customers import router as customers_router


logger = logging.getLogger(__name__)

app = FastAPI(title="Debt Manager")

# ─── CORS ─────────────────────────────────────────────────────────
# Open to every origin: intended for a trusted demo deployment only.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg") if errors else "Invalid request body"
    return JSONResponse(status_code=400, content={"detail": message})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(
        "database error",
        extra={"method": request.method, "path": request.url.path},
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.on_event("startup")
def startup():
    setup_logging()
    Base.metadata.create_all(bind=engine)
    logger.info("debt manager started", extra={"database": engine.url.render_as_string(hide_password=True)})


app.include_router(customers_router)
app.include_router(customers_router, prefix="/api")


@app.get("/")
def read_root():
    return {"message": "Debt Manager API is running"}


def main():
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT") or "3001"))


if __name__ == "__main__":
    main()
