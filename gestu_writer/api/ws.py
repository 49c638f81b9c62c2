from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
import asyncio
import base64
import time
import numpy as np
import cv2
import os
import logging
import concurrent.futures

from pydantic import ValidationError

from gestu_writer.api.deps import get_config
from gestu_writer.api.schemas.pose import PoseIn
from gestu_writer.config import AppConfig
from gestu_writer.ml.libras.session import TranscriptionSession
from gestu_writer.ml.libras.types import ConfigurationError

router = APIRouter()

DEBUG_WS = os.getenv("GESTU_WS_DEBUG", "0") == "1"

# код закрытия для "клиент прислал то, с чем работать нельзя"
WS_POLICY_VIOLATION = 1008

logger = logging.getLogger("gesture_ws")


def decode_frame_bgr(data_url: str) -> np.ndarray:
    _, encoded = data_url.split(",", 1)
    img_bytes = base64.b64decode(encoded)
    img = cv2.imdecode(np.frombuffer(img_bytes, np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError("cv2.imdecode returned None")
    return img


def _create_landmarker(cfg: AppConfig):
    # mediapipe тянем только когда реально пришёл кадр с камеры
    from gestu_writer.ml.landmarker import HandLandmarkerSession
    return HandLandmarkerSession(config=cfg.landmarker)


def state_payload(session: TranscriptionSession, state) -> dict:
    token = session.last_token
    payload = {"type": "state", **state.to_dict()}
    payload["token"] = token.to_dict() if token is not None else None
    return payload


@router.websocket("/ws/transcribe")
async def transcribe_ws(ws: WebSocket, cfg: AppConfig = Depends(get_config)):
    await ws.accept()

    alive = True

    ping_interval_s = cfg.ws.ping_interval_s
    last_ping = time.monotonic()

    # очередь кадров строго на 1 элемент => "всегда последний кадр", без накапливания лага
    q: asyncio.Queue[str] = asyncio.Queue(maxsize=1)

    # одна сессия = одна рука; состояние живёт только пока открыт сокет
    session = TranscriptionSession(cfg.timing, cfg.classifier.mode, cfg.classifier.history_size)

    frames_in = 0
    frames_dropped = 0
    poses_in = 0
    decode_ok = 0
    decode_err = 0
    processed = 0
    last_debug = 0.0

    async def fail(detail: str):
        nonlocal alive
        alive = False
        logger.warning(f"closing ws: {detail}")
        await ws.send_json({"type": "error", "detail": detail})
        await ws.close(code=WS_POLICY_VIOLATION)

    async def handle_pose(msg: dict):
        nonlocal poses_in, processed
        poses_in += 1
        now_ms = time.monotonic() * 1000.0
        try:
            pose = PoseIn.model_validate(msg).to_pose(now_ms)
        except ValidationError as e:
            await ws.send_json({"type": "error", "detail": f"bad pose: {e.error_count()} errors"})
            return
        state = session.process(pose, pose.timestamp_ms)
        processed += 1
        await ws.send_json(state_payload(session, state))

    async def receiver():
        nonlocal alive, frames_in, frames_dropped
        try:
            while alive:
                msg = await ws.receive_json()
                if not isinstance(msg, dict):
                    continue
                kind = msg.get("type")

                if kind == "pose":
                    try:
                        await handle_pose(msg)
                    except ConfigurationError as e:
                        await fail(str(e))
                        return
                elif kind == "reset":
                    session.reset()
                    await ws.send_json({"type": "reset", "ok": True})
                elif kind == "frame":
                    data = msg.get("data")
                    if not isinstance(data, str):
                        continue
                    frames_in += 1
                    if q.full():
                        frames_dropped += 1
                        q.get_nowait()
                    q.put_nowait(data)
        except WebSocketDisconnect:
            alive = False

    async def pinger():
        nonlocal last_ping, alive
        while alive:
            now = time.monotonic()
            if (now - last_ping) > ping_interval_s:
                last_ping = now
                try:
                    await ws.send_json({"type": "ping"})
                except (WebSocketDisconnect, RuntimeError):
                    alive = False
                    break
            await asyncio.sleep(0.25)

    recv_task = None
    ping_task = None

    # landmarker в отдельном single-thread executor:
    # так он живёт и вызывается всегда из одного потока.
    loop = asyncio.get_running_loop()
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    landmarker = None

    try:
        recv_task = asyncio.create_task(receiver())
        ping_task = asyncio.create_task(pinger())

        last_infer = 0.0
        infer_every_s = max(0.0, cfg.ws.infer_every_ms / 1000.0)

        while alive and not recv_task.done():
            try:
                data_url = await asyncio.wait_for(q.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue

            now = time.monotonic()

            if infer_every_s > 0 and (now - last_infer) < infer_every_s:
                continue
            last_infer = now

            try:
                frame = decode_frame_bgr(data_url)
                decode_ok += 1
            except (ValueError, cv2.error):
                decode_err += 1
                continue

            if landmarker is None:
                try:
                    landmarker = await loop.run_in_executor(executor, _create_landmarker, cfg)
                except ConfigurationError as e:
                    await fail(str(e))
                    break

            ts_ms = int(now * 1000)
            poses = await loop.run_in_executor(executor, landmarker.detect_bgr, frame, ts_ms)

            # основная рука — первая в результате
            pose = poses[0] if poses else None
            try:
                state = session.process(pose, ts_ms)
            except ConfigurationError as e:
                await fail(str(e))
                break
            processed += 1

            try:
                await ws.send_json(state_payload(session, state))
            except WebSocketDisconnect:
                alive = False
                break

            if DEBUG_WS and (now - last_debug) > 1.0:
                last_debug = now
                logger.info(
                    f"frames_in={frames_in} dropped={frames_dropped} poses_in={poses_in} "
                    f"decode_ok={decode_ok} decode_err={decode_err} "
                    f"processed={processed} active={state.active_symbol}"
                )

    except WebSocketDisconnect:
        pass
    finally:
        alive = False

        tasks = [t for t in (recv_task, ping_task) if t is not None]
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        session.close()
        if landmarker is not None:
            await loop.run_in_executor(executor, landmarker.close)
        executor.shutdown(wait=False)
