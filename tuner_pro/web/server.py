from __future__ import annotations

import io
import json
import logging

import numpy as np
import soundfile as sf
import uvicorn
from fastapi import FastAPI, File, HTTPException, UploadFile, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from tuner_pro import __version__
from tuner_pro import catalog
from tuner_pro.recording import analyze_recording
from tuner_pro.web.schemas import (
    CatalogResponse,
    ErrorEvent,
    InitMessage,
    StartMessage,
    StatusEvent,
    StopMessage,
    TuningTarget,
)
from tuner_pro.web.session import RealtimeSession, SessionManager

logger = logging.getLogger(__name__)

app = FastAPI(title="Tuner Pro", version=__version__)
sessions = SessionManager()


@app.get("/api/health")
async def health() -> dict[str, object]:
    return {
        "status": "ok",
        "version": __version__,
        "activeSessions": sessions.active_count,
    }


@app.get("/api/catalog", response_model=CatalogResponse)
async def tuning_catalog(instrument: str | None = None) -> CatalogResponse:
    if instrument is None:
        entries = sorted(catalog.TUNING_CATALOG.values(), key=lambda entry: entry.frequency)
    else:
        entries = list(catalog.entries_for(instrument))
        if not entries:
            raise HTTPException(status_code=404, detail=f"Unknown instrument: {instrument}")
    return CatalogResponse(
        instruments=list(catalog.instruments()),
        entries=[
            TuningTarget(
                note=e.note,
                frequency=e.frequency,
                instruments=list(e.instruments),
                equal_tempered=round(e.equal_tempered, 2),
            )
            for e in entries
        ],
    )


@app.post("/api/analyze")
def analyze(audio: UploadFile = File(...)) -> dict[str, object]:
    # Sync handler: FastAPI runs it in the threadpool, off the event loop.
    payload = audio.file.read()
    if not payload:
        raise HTTPException(status_code=400, detail="Audio file is empty")

    try:
        waveform, sample_rate = _decode_with_soundfile(payload)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=400, detail=f"Unable to decode audio: {exc}") from exc

    return analyze_recording(waveform, sample_rate).to_dict()


@app.websocket("/ws/tuner")
async def tuner_ws(websocket: WebSocket) -> None:
    await websocket.accept()
    session = sessions.create()
    await websocket.send_json(_status("Connected."))

    try:
        while True:
            message = await websocket.receive()
            if message.get("type") == "websocket.disconnect":
                break
            text = message.get("text")
            binary = message.get("bytes")

            if text is not None:
                for event in _handle_text_message(session, text):
                    await websocket.send_json(event)
            elif binary is not None:
                for event in session.process_audio_bytes(binary):
                    await websocket.send_json(event)
    except WebSocketDisconnect:
        pass
    finally:
        sessions.remove(session.session_id)


def _status(message: str) -> dict[str, object]:
    return StatusEvent(message=message).model_dump()


def _error(code: str, message: str) -> dict[str, object]:
    return ErrorEvent(code=code, message=message).model_dump()


def _handle_text_message(session: RealtimeSession, text: str) -> list[dict[str, object]]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return [_error("invalid_json", "Invalid JSON payload")]

    if not isinstance(payload, dict):
        return [_error("invalid_payload", "Expected JSON object")]

    msg_type = payload.get("type")
    try:
        if msg_type == "init":
            msg = InitMessage.model_validate(payload)
            if session.is_listening:
                return [_error("session_busy", "Stop the tuner before changing its settings.")]
            session.init(sample_rate=msg.sample_rate, frame_size=msg.frame_size)
            return [_status("Session initialized.")]

        if msg_type == "start":
            StartMessage.model_validate(payload)
            return [_status("Listening."), *session.start()]

        if msg_type == "stop":
            StopMessage.model_validate(payload)
            return [*session.stop(), _status("Stopped.")]

    except ValidationError as exc:
        return [_error("invalid_message", str(exc))]

    return [_error("unknown_message", f"Unknown type: {msg_type}")]


def _decode_with_soundfile(payload: bytes) -> tuple[np.ndarray, int]:
    data, sample_rate = sf.read(io.BytesIO(payload), dtype="float32", always_2d=False)
    audio = np.asarray(data, dtype=np.float32)
    if audio.ndim == 2:
        audio = np.mean(audio, axis=1, dtype=np.float32)
    if audio.size == 0:
        raise ValueError("decoded audio is empty")
    return audio, int(sample_rate)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    uvicorn.run(
        "tuner_pro.web.server:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
    )


if __name__ == "__main__":
    main()
