"""FastAPI server for the Fitting Room page.

Hosts the single page's state in process memory:
- two upload slots (person, outfit) that rotate and re-encode images
- one orchestrator that runs the Gemini try-on generation
- preview URLs for the uploaded images
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from fitting_room import __version__
from fitting_room.config import load_config
from fitting_room.errors import UnsupportedMediaType
from fitting_room.imaging import ImageNormalizer, RotateDirection
from fitting_room.log_config import configure_logging
from fitting_room.models import OrchestratorSnapshot, SourceFile
from fitting_room.pipeline import TryOnWorkbench

logger = logging.getLogger(__name__)


def build_workbench() -> TryOnWorkbench:
    """Read config once at startup. A missing API key stops the app here."""
    config = load_config()
    configure_logging(config.log_level)
    return TryOnWorkbench.from_config(config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    workbench = build_workbench()
    app.state.workbench = workbench
    logger.info("Fitting Room ready")
    try:
        yield
    finally:
        workbench.close()


app = FastAPI(
    title="Fitting Room API",
    description="Virtual try-on with Gemini image generation",
    version=__version__,
    lifespan=lifespan,
)

# Enable CORS for a separately served page
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RotateRequest(BaseModel):
    """Request body for a quarter-turn."""
    direction: RotateDirection


class SlotView(BaseModel):
    """What the upload widget needs to render a slot."""
    name: str
    has_image: bool
    rotation_quarters: int
    busy: bool
    preview_url: str | None = None
    mime_type: str | None = None
    alert: str | None = None


def get_workbench(request: Request) -> TryOnWorkbench:
    return request.app.state.workbench


def get_slot(request: Request, name: str) -> ImageNormalizer:
    try:
        return get_workbench(request).slot(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown slot: {name}")


def slot_view(name: str, slot: ImageNormalizer) -> SlotView:
    return SlotView(
        name=name,
        has_image=slot.prepared is not None,
        rotation_quarters=slot.rotation_quarters,
        busy=slot.busy,
        preview_url=slot.preview_url,
        mime_type=slot.prepared.mime_type if slot.prepared else None,
        alert=slot.last_alert,
    )


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Fitting Room API", "version": __version__}


@app.get("/api/slots/{name}", response_model=SlotView)
async def read_slot(name: str, request: Request):
    return slot_view(name, get_slot(request, name))


@app.post("/api/slots/{name}", response_model=SlotView)
async def select_image(name: str, request: Request, file: UploadFile = File(...)):
    """Upload a new image into a slot. Rotation resets to zero."""
    slot = get_slot(request, name)
    source = SourceFile(
        media_type=file.content_type or "application/octet-stream",
        data=await file.read(),
        filename=file.filename,
    )
    try:
        await slot.select(source)
    except UnsupportedMediaType as e:
        raise HTTPException(status_code=415, detail=str(e))
    return slot_view(name, slot)


@app.post("/api/slots/{name}/rotate", response_model=SlotView)
async def rotate_image(name: str, body: RotateRequest, request: Request):
    slot = get_slot(request, name)
    await slot.rotate(body.direction)
    return slot_view(name, slot)


@app.delete("/api/slots/{name}", response_model=SlotView)
async def clear_image(name: str, request: Request):
    slot = get_slot(request, name)
    slot.clear()
    return slot_view(name, slot)


@app.get("/previews/{token}")
async def read_preview(token: str, request: Request):
    blob = get_workbench(request).previews.resolve(token)
    if blob is None:
        raise HTTPException(status_code=404, detail="Preview not found")
    return Response(content=blob.data, media_type=blob.mime_type)


@app.post("/api/generate", response_model=OrchestratorSnapshot)
async def generate(request: Request):
    """Run a try-on generation with the current slots.

    Does nothing unless both images are present and no generation is running.
    Errors are reported in the snapshot's ``error`` field.
    """
    orchestrator = get_workbench(request).orchestrator
    await orchestrator.generate()
    return orchestrator.snapshot()


@app.get("/api/state", response_model=OrchestratorSnapshot)
async def read_state(request: Request):
    return get_workbench(request).orchestrator.snapshot()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
