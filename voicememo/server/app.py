"""HTTP server exposing the transcription upload endpoint."""

import os
import re
import time
import random
import string
import logging
from pathlib import Path
from typing import Optional

from aiohttp import web

from ..audio.wav_encoder import read_wav_header
from ..config import VoiceMemoConfig
from ..transcription import AbstractTranscriptionBackend, CommandTranscriptionBackend

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Transcription failed, please try again later."
MISSING_FILE_MESSAGE = "No uploaded audio file found."
DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024

BACKEND_KEY = web.AppKey("backend", AbstractTranscriptionBackend)
TEMP_DIR_KEY = web.AppKey("temp_dir", Path)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")
_NON_WAV_EXTENSION = re.compile(r"\.(?!wav$)[^.]+$", re.IGNORECASE)


def safe_upload_filename(name: Optional[str]) -> str:
    """Sanitize an uploaded file name and force a .wav extension."""
    base = _UNSAFE_CHARS.sub("_", name or "audio")
    base = _NON_WAV_EXTENSION.sub("", base)
    if not base.lower().endswith(".wav"):
        base = f"{base}.wav"
    return base


def unique_temp_path(temp_dir: Path, filename: Optional[str]) -> Path:
    """Temp file path <ms timestamp>-<6 random chars>-<safe name> inside temp_dir."""
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return temp_dir / f"{int(time.time() * 1000)}-{suffix}-{safe_upload_filename(filename)}"


def _remove_quietly(path: Path) -> None:
    try:
        os.remove(path)
    except OSError as e:
        logger.debug(f"Could not remove temp file {path}: {e}")


async def health(_request: web.Request) -> web.Response:
    return web.json_response({"ok": True})


async def transcribe(request: web.Request) -> web.Response:
    """Accept a multipart `file` upload, run the backend on it and return {text}."""
    backend = request.app[BACKEND_KEY]
    temp_dir = request.app[TEMP_DIR_KEY]

    try:
        form = await request.post()
        upload = form.get("file")
        if not isinstance(upload, web.FileField):
            return web.json_response({"error": MISSING_FILE_MESSAGE}, status=400)

        audio_bytes = upload.file.read()
        try:
            header = read_wav_header(audio_bytes)
            logger.info(f"Received {upload.filename}: {len(audio_bytes)} bytes, "
                        f"{header['sample_rate']}Hz, {header['channels']} channel(s)")
        except ValueError as e:
            logger.warning(f"Upload {upload.filename} is not a canonical WAV file: {e}")

        temp_dir.mkdir(parents=True, exist_ok=True)
        temp_path = unique_temp_path(temp_dir, upload.filename)
        try:
            with open(temp_path, 'wb') as f:
                f.write(audio_bytes)
            text = await backend.transcribe_file(str(temp_path))
        finally:
            _remove_quietly(temp_path)

        logger.info(f"Transcribed {upload.filename}: {len(text)} characters")
        return web.json_response({"text": text})

    except web.HTTPException:
        # e.g. 413 from request.post() when the body exceeds client_max_size
        raise
    except Exception as e:
        logger.exception("Transcribe error")
        return web.json_response({"error": str(e) or DEFAULT_ERROR_MESSAGE}, status=500)


def create_app(backend: AbstractTranscriptionBackend, temp_dir: str,
               max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> web.Application:
    """Build the aiohttp application.

    Args:
        backend: Backend that turns the uploaded file into text
        temp_dir: Directory uploads are written to while being transcribed
        max_upload_bytes: Largest accepted request body
    """
    app = web.Application(client_max_size=max_upload_bytes)
    app[BACKEND_KEY] = backend
    app[TEMP_DIR_KEY] = Path(temp_dir)

    app.router.add_get("/api/health", health)
    app.router.add_post("/api/transcribe", transcribe)
    return app


def create_app_from_config(config: VoiceMemoConfig) -> web.Application:
    backend = CommandTranscriptionBackend(
        command=config.get_transcription_command(),
        timeout_seconds=config.get('transcription.timeout_seconds', 300),
    )
    return create_app(
        backend=backend,
        temp_dir=config.get_temp_directory(),
        max_upload_bytes=config.get('server.max_upload_bytes', DEFAULT_MAX_UPLOAD_BYTES),
    )


def run_server(config: VoiceMemoConfig) -> None:
    """Serve the transcription endpoint until interrupted."""
    app = create_app_from_config(config)
    host = config.get('server.host', '127.0.0.1')
    port = int(config.get('server.port', 8000))
    logger.info(f"Starting transcription server on http://{host}:{port} "
                f"with the {app[BACKEND_KEY].name} backend")
    web.run_app(app, host=host, port=port, print=None)
