import os
import logging
from contextlib import asynccontextmanager
from typing import List

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database import MongoTaskStore, close_db, get_db
from schemas import Task, TaskCreate, TaskUpdate
from service import NotFoundError, TaskService, ValidationError

API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_db()


app = FastAPI(title="Task Manager API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def get_task_service() -> TaskService:
    return TaskService(MongoTaskStore(await get_db()))


@app.exception_handler(ValidationError)
async def task_validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"message": str(exc)})


@app.exception_handler(NotFoundError)
async def task_not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"message": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    logger.info("Malformed request %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@app.get("/", tags=["health"])
async def root():
    return {"message": "Welcome to the Todo List Application!"}


@app.get("/hello", tags=["health"])
async def hello():
    return {"message": "Hello, FastAPI!"}


@app.get("/tasks", response_model=List[Task])
async def list_tasks(service: TaskService = Depends(get_task_service)):
    return await service.list_tasks()


@app.post("/tasks", response_model=Task)
async def create_task(payload: TaskCreate, service: TaskService = Depends(get_task_service)):
    return await service.add_task(payload.to_task())


@app.put("/tasks/{task_id}", response_model=Task)
async def update_task(task_id: int, payload: TaskUpdate, service: TaskService = Depends(get_task_service)):
    return await service.update_task(task_id, payload.to_task())


@app.delete("/tasks/{task_id}", status_code=204)
async def remove_task(task_id: int, service: TaskService = Depends(get_task_service)):
    await service.delete_task(task_id)
    return Response(status_code=204)


@app.put("/tasks/{task_id}/complete", response_model=Task)
async def complete_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return await service.complete_task(task_id)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=False,
        log_level=LOG_LEVEL.lower(),
    )
