"""FastAPI record store backing the NovaOS desktop."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import ShellConfig
from ..exceptions import AuthFailure, RecordNotFound
from ..models import FileRecord, RecordKind
from ..runtime import ShellRuntime

_HTTP_BAD_REQUEST = 400
_HTTP_UNAUTHORIZED = 401

runtime = ShellRuntime.bootstrap(ShellConfig.from_env())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    logger.info("NovaOS record store ready (database=%s)", runtime.config.database.dsn)
    try:
        yield
    finally:
        runtime.shutdown()
        logger.info("NovaOS record store stopped")


app = FastAPI(title="NovaOS Record Store", version="0.1.0", lifespan=_lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=runtime.config.api.cors_origins or ["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class _CamelAliasModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CredentialsRequest(BaseModel):
    username: str
    password: str


class RecordCreateRequest(_CamelAliasModel):
    owner_id: int = Field(alias="ownerId")
    name: str
    content: str = Field(default="")
    kind: RecordKind = Field(default=RecordKind.FILE)
    parent_id: Optional[int] = Field(default=None, alias="parentId")


class RecordUpdateRequest(BaseModel):
    name: str
    content: str = Field(default="")


@app.post("/api/auth/register")
async def register(payload: CredentialsRequest):
    try:
        user = runtime.principal_service.register(payload.username, payload.password)
    except AuthFailure as exc:
        return JSONResponse(status_code=_HTTP_BAD_REQUEST, content={"error": str(exc)})
    return {"success": True, "userId": user.id}


@app.post("/api/auth/login")
async def login(payload: CredentialsRequest):
    try:
        user = runtime.principal_service.authenticate(payload.username, payload.password)
    except AuthFailure as exc:
        return JSONResponse(status_code=_HTTP_UNAUTHORIZED, content={"error": str(exc)})
    return {"success": True, "user": {"id": user.id, "username": user.username}}


@app.get("/api/files/{owner_id}")
async def list_records(owner_id: int):
    return [_serialize_record(record) for record in runtime.record_service.list_for_owner(owner_id)]


@app.post("/api/files")
async def create_record(payload: RecordCreateRequest):
    record = runtime.record_service.create(
        payload.owner_id,
        payload.name,
        payload.kind,
        content=payload.content,
        parent_id=payload.parent_id,
    )
    return {"id": record.id}


@app.put("/api/files/{record_id}")
async def update_record(record_id: int, payload: RecordUpdateRequest):
    try:
        runtime.record_service.update(record_id, payload.name, payload.content)
    except RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"success": True}


@app.delete("/api/files/{record_id}")
async def delete_record(record_id: int):
    runtime.record_service.delete(record_id)
    return {"success": True}


def _serialize_record(record: FileRecord) -> dict:
    return record.to_wire()
