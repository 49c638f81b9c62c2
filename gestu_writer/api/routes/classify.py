from fastapi import APIRouter, Depends, HTTPException

from gestu_writer.api.deps import get_config
from gestu_writer.api.schemas.pose import PoseIn
from gestu_writer.api.schemas.transcription import ClassifyOut
from gestu_writer.config import AppConfig
from gestu_writer.ml.libras.static_signs import classify_static
from gestu_writer.ml.libras.types import MissingHandednessError

router = APIRouter(prefix="/api/v1", tags=["classify"])


@router.post("/classify", response_model=ClassifyOut)
def classify_pose(payload: PoseIn, cfg: AppConfig = Depends(get_config)):
    try:
        token = classify_static(payload.to_pose(), cfg.classifier.mode)
    except MissingHandednessError as e:
        raise HTTPException(422, str(e))
    return {"token": token.to_dict() if token else None}


@router.get("/config")
def read_config(cfg: AppConfig = Depends(get_config)):
    return cfg.to_dict()
