"""
FastAPI backend for Drill AI - Drilling Data Dashboard.

Provides REST API endpoints for:
- Uploading and parsing drilling spreadsheets (CSV, Excel)
- Managing the well list and each well's uploaded data
- Chart-ready series per well
- The canned chat assistant and per-well chat transcripts
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import os

from fastapi import FastAPI, UploadFile, File, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel

from drill_ai.models import Well
from drill_ai.database import get_session, init_db, close_db
from drill_ai.parser import IngestError, NoFileProvided, parse_upload
from drill_ai.charts import build_chart_series
from drill_ai.responder import generate_response, welcome_message
from drill_ai import queries


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s"
)
logger = logging.getLogger(__name__)

MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE_MB", "20")) * 1024 * 1024

PROCESS_ERROR_DETAIL = "Failed to process file"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables on startup, release connections on shutdown."""
    await init_db()
    logger.info("✓ Database initialized successfully")
    yield
    await close_db()


# Initialize FastAPI app
app = FastAPI(
    title="Drill AI API",
    description="Drilling Data Dashboard - Backend API",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Single-user local dashboard
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Response Models
class UploadResponse(BaseModel):
    """Response model for file upload endpoint"""
    success: bool
    message: str
    data: List[Dict[str, Any]]
    total_rows: int
    filtered_rows: int
    final_rows: int
    headers: List[str]


class WellResponse(BaseModel):
    """Response model for a well in the well list"""
    name: str
    depth: float
    status: str
    data_points: int = 0
    welcome: str = ""


class WellUploadResponse(UploadResponse):
    """Upload into a well: the parse result plus the updated well"""
    well: WellResponse


class WellListResponse(BaseModel):
    total: int
    wells: List[WellResponse]


class CreateWellRequest(BaseModel):
    """Request model for adding a well"""
    name: Optional[str] = None


class Attachment(BaseModel):
    """File attached to a chat message"""
    id: str
    name: str
    type: str = ""
    size: int = 0
    content: Optional[str] = None


class ChatRequest(BaseModel):
    """Request model for the chat assistant"""
    message: str = ""
    attachments: Optional[List[Attachment]] = None


class MessageResponse(BaseModel):
    """Response model for one chat message"""
    id: str
    role: str
    content: str
    timestamp: datetime
    attachments: Optional[List[Dict[str, Any]]] = None


class ChatResponse(BaseModel):
    success: bool
    response: str
    user_message: MessageResponse
    assistant_message: MessageResponse


def _message_response(message) -> MessageResponse:
    return MessageResponse(
        id=str(message.id),
        role=message.role,
        content=message.content,
        timestamp=message.timestamp,
        attachments=message.attachments
    )


async def _well_response(session: AsyncSession, well: Well) -> WellResponse:
    records = await queries.get_well_records(session, well.name)
    return WellResponse(
        name=well.name,
        depth=well.depth,
        status=well.status,
        data_points=len(records),
        welcome=welcome_message(well.name)
    )


async def _require_well(session: AsyncSession, name: str) -> Well:
    well = await queries.get_well(session, name)
    if not well:
        raise HTTPException(
            status_code=404,
            detail=f"Well '{name}' not found"
        )
    return well


async def _read_upload(file: Optional[UploadFile]) -> Dict[str, Any]:
    """
    Read and parse an uploaded file.

    Ingestion errors are converted to HTTP errors here: a missing payload is a
    client error, anything that fails to decode is a generic processing error.
    """
    content = await file.read() if file is not None else None
    filename = file.filename if file is not None else ""

    if content is not None and len(content) > MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {MAX_UPLOAD_SIZE // (1024 * 1024)} MB upload limit"
        )

    try:
        return parse_upload(content, filename)
    except NoFileProvided as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IngestError:
        logger.exception("Upload error for '%s'", filename)
        raise HTTPException(status_code=500, detail=PROCESS_ERROR_DETAIL)


def _upload_payload(parsed: Dict[str, Any]) -> Dict[str, Any]:
    records = parsed["records"]
    return {
        "success": True,
        "message": f"File uploaded and processed successfully. Found {len(records)} data points.",
        "data": records,
        "total_rows": parsed["total_rows"],
        "filtered_rows": parsed["filtered_rows"],
        "final_rows": len(records),
        "headers": parsed["headers"],
    }


# Health check endpoint
@app.get("/")
async def root():
    """Root endpoint - health check"""
    return {
        "service": "Drill AI API",
        "status": "operational",
        "version": "1.0.0"
    }


@app.post("/upload", response_model=UploadResponse)
async def upload_file(file: Optional[UploadFile] = File(None)):
    """
    Parse a drilling spreadsheet without storing it.

    The endpoint:
    1. Accepts .csv files and Excel workbooks (first sheet only)
    2. Maps every data row to a record keyed by the header names
    3. Keeps rows with a positive depth (or all rows if none qualify)

    Returns:
        UploadResponse with the records and row counts
    """
    parsed = await _read_upload(file)
    return UploadResponse(**_upload_payload(parsed))


@app.get("/wells", response_model=WellListResponse)
async def list_wells(session: AsyncSession = Depends(get_session)):
    """List all wells with their depth, status and number of data points."""
    wells = await queries.load_wells(session)
    responses = [await _well_response(session, well) for well in wells]
    return WellListResponse(total=len(responses), wells=responses)


@app.post("/wells", response_model=WellResponse, status_code=201)
async def add_well(
    request: Optional[CreateWellRequest] = None,
    session: AsyncSession = Depends(get_session)
):
    """
    Add a new well with no data.

    The name defaults to the next free 'Well <letter>'.
    """
    name = request.name.strip() if request and request.name else None

    # Names are used as a single path segment
    if name and "/" in name:
        raise HTTPException(
            status_code=400,
            detail="Well names cannot contain '/'"
        )

    if name and await queries.get_well(session, name):
        raise HTTPException(
            status_code=409,
            detail=f"Well '{name}' already exists"
        )

    try:
        well = await queries.create_well(session, name)
    except IntegrityError:
        await session.rollback()
        raise HTTPException(
            status_code=409,
            detail="A well with that name already exists"
        )
    except Exception as e:
        await session.rollback()
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(e)}"
        )

    return await _well_response(session, well)


@app.delete("/wells/{name}")
async def delete_well(
    name: str,
    session: AsyncSession = Depends(get_session)
):
    """
    Delete a well and everything stored for it (data and chat history).

    The last remaining well cannot be deleted.
    """
    await _require_well(session, name)

    if await queries.count_wells(session) <= 1:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete the last well"
        )

    try:
        counts = await queries.delete_well(session, name)
    except Exception as e:
        await session.rollback()
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(e)}"
        )

    return {
        "success": True,
        "message": f"Deleted {name}",
        "name": name,
        "deleted_messages": counts["messages"],
        "deleted_record_sets": counts["record_sets"]
    }


@app.post("/wells/{name}/upload", response_model=WellUploadResponse)
async def upload_well_data(
    name: str,
    file: Optional[UploadFile] = File(None),
    session: AsyncSession = Depends(get_session)
):
    """
    Parse a drilling spreadsheet and make it the well's data.

    Previously stored data is only replaced after the file parsed successfully;
    a failed upload leaves the well untouched.
    """
    well = await _require_well(session, name)
    parsed = await _read_upload(file)

    try:
        well = await queries.replace_well_data(session, well, parsed, file.filename)
    except Exception as e:
        await session.rollback()
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(e)}"
        )

    payload = _upload_payload(parsed)
    payload["well"] = await _well_response(session, well)
    return WellUploadResponse(**payload)


@app.get("/wells/{name}/data")
async def get_well_data(
    name: str,
    session: AsyncSession = Depends(get_session)
):
    """Canonical records currently stored for a well."""
    await _require_well(session, name)
    well_data = await queries.get_well_data(session, name)

    if not well_data:
        return {"name": name, "total": 0, "data": [], "headers": [], "source_filename": None}

    return {
        "name": name,
        "total": len(well_data.records),
        "data": well_data.records,
        "headers": well_data.headers,
        "source_filename": well_data.source_filename
    }


@app.get("/wells/{name}/charts")
async def get_well_charts(
    name: str,
    session: AsyncSession = Depends(get_session)
):
    """Chart-ready series (rock composition, DT, GR) for a well."""
    await _require_well(session, name)
    records = await queries.get_well_records(session, name)
    return {"name": name, **build_chart_series(records)}


@app.get("/wells/{name}/messages", response_model=List[MessageResponse])
async def get_well_messages(
    name: str,
    session: AsyncSession = Depends(get_session)
):
    """A well's chat transcript, oldest first."""
    await _require_well(session, name)
    messages = await queries.get_messages(session, name)
    return [_message_response(message) for message in messages]


@app.post("/wells/{name}/chat", response_model=ChatResponse)
async def chat(
    name: str,
    request: ChatRequest,
    session: AsyncSession = Depends(get_session)
):
    """
    Send a message to the chat assistant for a well.

    Both the user's message and the assistant's reply are appended to the
    well's transcript.
    """
    await _require_well(session, name)

    attachments = [a.model_dump(exclude_none=True) for a in request.attachments or []]
    if not request.message.strip() and not attachments:
        raise HTTPException(
            status_code=400,
            detail="No message or attachments provided"
        )

    records = await queries.get_well_records(session, name)
    reply = generate_response(request.message, name, records, attachments)

    try:
        user_message = await queries.append_message(
            session, name, "user", request.message, attachments
        )
        assistant_message = await queries.append_message(session, name, "assistant", reply)
    except Exception as e:
        await session.rollback()
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(e)}"
        )

    return ChatResponse(
        success=True,
        response=reply,
        user_message=_message_response(user_message),
        assistant_message=_message_response(assistant_message)
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
