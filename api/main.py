"""Elastiko Gateway API — cluster session, query and index admin service."""

import logging
from datetime import datetime

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST
from pydantic import BaseModel, Field
from sqlmodel import Session, select

from connector_models import (
    AcknowledgedResult,
    ClusterHealth,
    ConnectResult,
    CreateIndexResult,
    DeleteByQueryResult,
    DocumentWriteResult,
    IndexSummary,
    QueryResult,
    SessionInfo,
)
from database import create_db, get_session
from errors import GatewayError, QuerySyntaxError
from es_connector import ClusterGateway
from models import (
    ConnectionDescriptor,
    ConnectionProfile,
    ProfileCreate,
    ProfileResponse,
    ProfileUpdate,
)
from prometheus_exporter import collect_and_generate

log = logging.getLogger(__name__)

app = FastAPI(title="Elastiko Gateway API", version="0.1.0")

# The one gateway (session store + shared client) for this process
gateway = ClusterGateway()


def get_gateway() -> ClusterGateway:
    return gateway


# Gateway error kind -> HTTP status for the JSON error body
_ERROR_STATUS = {
    "not_connected": 409,
    "connection": 502,
    "server": 502,
    "response_parse": 502,
    "query_syntax": 422,
    "encoding": 400,
}


@app.exception_handler(GatewayError)
async def gateway_error_handler(request, exc: GatewayError):
    return JSONResponse(
        status_code=_ERROR_STATUS.get(exc.kind, 500),
        content={"detail": str(exc), "kind": exc.kind},
    )


@app.on_event("startup")
def on_startup():
    create_db()


@app.on_event("shutdown")
async def on_shutdown():
    await gateway.aclose()


async def _body_text(request: Request) -> str:
    """Raw request body as text; JSON validation happens in the gateway."""
    raw = await request.body()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise QuerySyntaxError(f"Request body is not valid UTF-8: {e}") from e


# ── Session endpoints ─────────────────────────────────────────────────


@app.post("/api/session/connect", response_model=ConnectResult)
async def api_connect(body: ConnectionDescriptor, gw: ClusterGateway = Depends(get_gateway)):
    return await gw.connect(body)


@app.delete("/api/session")
async def api_disconnect(gw: ClusterGateway = Depends(get_gateway)):
    return {"disconnected": await gw.disconnect()}


@app.get("/api/session", response_model=SessionInfo)
def api_current_session(gw: ClusterGateway = Depends(get_gateway)):
    return gw.current()


# ── Cluster & index endpoints ─────────────────────────────────────────


@app.get("/api/cluster/health", response_model=ClusterHealth)
async def api_cluster_health(gw: ClusterGateway = Depends(get_gateway)):
    return await gw.get_cluster_health()


@app.get("/api/indices", response_model=list[IndexSummary])
async def api_list_indices(gw: ClusterGateway = Depends(get_gateway)):
    return await gw.list_indices()


@app.put("/api/indices/{index}", response_model=CreateIndexResult, status_code=201)
async def api_create_index(index: str, request: Request, gw: ClusterGateway = Depends(get_gateway)):
    return await gw.create_index(index, await _body_text(request))


@app.delete("/api/indices/{index}", response_model=AcknowledgedResult)
async def api_delete_index(index: str, gw: ClusterGateway = Depends(get_gateway)):
    return await gw.delete_index(index)


@app.get("/api/indices/{index}/mapping")
async def api_get_mappings(index: str, gw: ClusterGateway = Depends(get_gateway)):
    return await gw.get_index_mappings(index)


@app.get("/api/indices/{index}/settings")
async def api_get_settings(index: str, gw: ClusterGateway = Depends(get_gateway)):
    return await gw.get_index_settings(index)


@app.post("/api/indices/{index}/search", response_model=QueryResult)
async def api_execute_query(index: str, request: Request, gw: ClusterGateway = Depends(get_gateway)):
    """Run a search; the body is the raw query JSON text."""
    return await gw.execute_query(index, await _body_text(request))


# ── Document endpoints ────────────────────────────────────────────────


class DeleteDocumentsRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)


@app.post("/api/indices/{index}/documents", response_model=DocumentWriteResult, status_code=201)
async def api_create_document(
    index: str,
    request: Request,
    doc_id: str | None = Query(default=None, description="Document id; generated when omitted"),
    gw: ClusterGateway = Depends(get_gateway),
):
    return await gw.create_document(index, await _body_text(request), doc_id=doc_id)


@app.post("/api/indices/{index}/documents/delete", response_model=DeleteByQueryResult)
async def api_delete_documents(
    index: str,
    body: DeleteDocumentsRequest,
    gw: ClusterGateway = Depends(get_gateway),
):
    return await gw.delete_documents(index, body.ids)


@app.delete("/api/indices/{index}/documents", response_model=DeleteByQueryResult)
async def api_delete_all_documents(index: str, gw: ClusterGateway = Depends(get_gateway)):
    return await gw.delete_all_documents(index)


# ── Saved connection profiles ─────────────────────────────────────────


@app.post("/api/connections", response_model=ProfileResponse, status_code=201)
def create_profile(body: ProfileCreate, session: Session = Depends(get_session)):
    now = datetime.utcnow()
    profile = ConnectionProfile(
        name=body.name,
        host=body.host,
        port=body.port,
        ssl=body.ssl,
        auth=body.auth.model_dump(),
        created_at=now,
        updated_at=now,
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return ProfileResponse.from_db(profile)


@app.get("/api/connections", response_model=list[ProfileResponse])
def list_profiles(session: Session = Depends(get_session)):
    profiles = session.exec(select(ConnectionProfile)).all()
    return [ProfileResponse.from_db(p) for p in profiles]


@app.get("/api/connections/{profile_id}", response_model=ProfileResponse)
def get_profile(profile_id: str, session: Session = Depends(get_session)):
    profile = session.get(ConnectionProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Connection not found")
    return ProfileResponse.from_db(profile)


@app.put("/api/connections/{profile_id}", response_model=ProfileResponse)
def update_profile(
    profile_id: str, body: ProfileUpdate, session: Session = Depends(get_session)
):
    profile = session.get(ConnectionProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Connection not found")

    # Nested auth dumps to a plain dict, ready for the JSON column
    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is not None:
            setattr(profile, field, value)

    profile.updated_at = datetime.utcnow()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return ProfileResponse.from_db(profile)


@app.delete("/api/connections/{profile_id}", status_code=204)
def delete_profile(profile_id: str, session: Session = Depends(get_session)):
    profile = session.get(ConnectionProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Connection not found")
    session.delete(profile)
    session.commit()
    return None


@app.post("/api/connections/{profile_id}/connect", response_model=ConnectResult)
async def connect_profile(
    profile_id: str,
    session: Session = Depends(get_session),
    gw: ClusterGateway = Depends(get_gateway),
):
    """Connect using a saved profile; the profile becomes the active session on success."""
    profile = session.get(ConnectionProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Connection not found")
    descriptor = ProfileResponse.from_db(profile).to_descriptor()
    log.info("Connecting with saved profile %s (%s)", profile.id, profile.name)
    return await gw.connect(descriptor)


# ── Health & metrics ──────────────────────────────────────────────────


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics(gw: ClusterGateway = Depends(get_gateway)):
    return Response(content=collect_and_generate(gw.session), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    import uvicorn

    from config import API_HOST, API_PORT

    uvicorn.run("main:app", host=API_HOST, port=API_PORT, reload=False, log_level="info")
