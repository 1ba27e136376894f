from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import structlog
import uvicorn
from router import router
from auth import auth_router
from settings_router import settings_router
from database import Base, engine
from logging_config import configure_logging

configure_logging()
logger = structlog.get_logger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Expense Calendar API")


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    # the request's session is rolled back when get_db closes it
    logger.error(
        "database_error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return JSONResponse(status_code=500, content={"detail": "Database error"})


app.include_router(router, prefix="/api", tags=["expenses"])
app.include_router(settings_router, prefix="/api/settings", tags=["settings"])
app.include_router(auth_router, prefix="/auth", tags=["authentication"])


@app.get("/")
def home():
    return {"message": "Welcome to Expense Calendar API"}


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
