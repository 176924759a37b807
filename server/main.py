"""FastAPI server entrypoint for Neusicgen.

Exposes sequence generation, MIDI export and preset listing over a small
REST API for the composer front end.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
import uvicorn

from composition.musical_tables import key_label
from server.config import get_config
from server.di_container import cleanup_container, get_container
from server.logging_config import setup_logging
from server.midi_encoder import default_filename, encode
from server.presets import list_presets
from server.schemas import ExportRequest, GenerateRequest

# Initialize logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager (startup/shutdown).

    Args:
        app: FastAPI application instance

    Yields:
        Control during application lifetime
    """
    logger.info("Starting Neusicgen server...")

    container = get_container()
    config = container.get_config()

    logger.info(f"Environment: {config.env}")
    logger.info(f"Host: {config.host}:{config.port}")
    logger.info(
        f"Generation delay: {config.generation_delay_min_ms:.0f}-"
        f"{config.generation_delay_max_ms:.0f}ms"
    )

    yield

    logger.info("Shutting down Neusicgen server...")
    await cleanup_container()
    logger.info("Neusicgen server stopped")


# Create FastAPI app
app = FastAPI(
    title="Neusicgen API",
    version="1.0.0",
    description="Procedural melody generation and MIDI export",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "neusicgen"}


@app.get("/api/presets")
async def get_presets() -> list[dict[str, Any]]:
    """Get available generation presets."""
    return list_presets()


@app.post("/api/generate")
async def generate_sequence(request: GenerateRequest) -> dict[str, Any]:
    """Generate a note sequence.

    Args:
        request: Generation parameters

    Returns:
        Sequence notes and metadata
    """
    generator = get_container().get_sequence_generator()

    start_time = time.perf_counter()
    sequence = await generator.generate(request.to_parameters())
    elapsed_ms = (time.perf_counter() - start_time) * 1000.0

    logger.info(
        f"Generated {len(sequence)} notes ({request.genre}, {request.key}) "
        f"in {elapsed_ms:.0f}ms",
        extra={"latency_ms": elapsed_ms, "note_count": len(sequence)},
    )

    payload = sequence.to_dict()
    payload["key_signature"] = key_label(sequence.key)
    payload["total_beats"] = sequence.total_beats
    return payload


@app.post("/api/export")
async def export_midi(request: ExportRequest) -> Response:
    """Export a sequence as a MIDI file download.

    Args:
        request: Sequence to export, or parameters to generate one from

    Returns:
        audio/midi attachment
    """
    if request.sequence is not None:
        sequence = request.sequence.to_sequence()
    elif request.parameters is not None:
        generator = get_container().get_sequence_generator()
        sequence = await generator.generate(request.parameters.to_parameters())
    else:
        raise HTTPException(
            status_code=422, detail="Either 'sequence' or 'parameters' is required"
        )

    data = encode(sequence, include_note_events=request.include_note_events)
    filename = default_filename()

    logger.info(f"Exporting {filename} ({len(data)} bytes, {len(sequence)} notes)")

    return Response(
        content=data,
        media_type="audio/midi",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    config = get_config()
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
