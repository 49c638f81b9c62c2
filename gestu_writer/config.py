import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

import yaml

from gestu_writer.ml.buffer import MIN_HISTORY
from gestu_writer.ml.libras.static_signs import MODES
from gestu_writer.ml.libras.transcription import TimingConfig
from gestu_writer.ml.libras.types import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yml"

# env -> (секция, ключ, тип)
ENV_OVERRIDES = {
    "GESTU_HOLD_MS": ("timing", "hold_duration", float),
    "GESTU_EARLY_LOCK_MS": ("timing", "early_lock", float),
    "GESTU_WORD_COOLDOWN_MS": ("timing", "word_cooldown", float),
    "GESTU_CLASSIFIER_MODE": ("classifier", "mode", str),
    "GESTU_HISTORY_SIZE": ("classifier", "history_size", int),
    "GESTU_WS_INFER_EVERY_MS": ("ws", "infer_every_ms", int),
}


@dataclass(frozen=True)
class ClassifierConfig:
    mode: str = "mixed"
    history_size: int = 24


@dataclass(frozen=True)
class LandmarkerConfig:
    num_hands: int = 1
    min_hand_detection_confidence: float = 0.5
    min_hand_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


@dataclass(frozen=True)
class WsConfig:
    ping_interval_s: float = 10.0
    infer_every_ms: int = 0


@dataclass(frozen=True)
class AppConfig:
    timing: TimingConfig = field(default_factory=TimingConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    landmarker: LandmarkerConfig = field(default_factory=LandmarkerConfig)
    ws: WsConfig = field(default_factory=WsConfig)

    def to_dict(self) -> dict:
        return {
            "timing": vars(self.timing).copy(),
            "classifier": vars(self.classifier).copy(),
            "landmarker": vars(self.landmarker).copy(),
            "ws": vars(self.ws).copy(),
        }


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"config не найден: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _apply_env(raw: dict) -> dict:
    for env_name, (section, key, cast) in ENV_OVERRIDES.items():
        value = os.getenv(env_name, "").strip()
        if not value:
            continue
        try:
            raw.setdefault(section, {})[key] = cast(value)
        except ValueError:
            raise ConfigurationError(f"{env_name}={value!r}: ожидается {cast.__name__}")
    return raw


def _section(raw: dict, name: str, cls):
    data = raw.get(name) or {}
    unknown = set(data) - set(cls.__dataclass_fields__)
    if unknown:
        raise ConfigurationError(f"Неизвестные ключи в секции {name}: {sorted(unknown)}")
    return replace(cls(), **data)


def validate(cfg: AppConfig) -> AppConfig:
    t = cfg.timing
    for name in ("hold_duration", "early_lock", "word_cooldown"):
        if getattr(t, name) <= 0:
            raise ConfigurationError(f"timing.{name} должен быть > 0")
    for name in ("debounce_early", "debounce_normal"):
        if getattr(t, name) < 0:
            raise ConfigurationError(f"timing.{name} не может быть отрицательным")
    if not (0.0 <= t.high_confidence_threshold <= 1.0):
        raise ConfigurationError("timing.high_confidence_threshold должен быть в [0, 1]")
    if cfg.classifier.mode not in MODES:
        raise ConfigurationError(f"classifier.mode: {cfg.classifier.mode!r}, допустимо {MODES}")
    if cfg.classifier.history_size < MIN_HISTORY:
        raise ConfigurationError(f"classifier.history_size должен быть >= {MIN_HISTORY}")
    return cfg


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Порядок:
      1) явный аргумент path
      2) env GESTU_CONFIG_PATH
      3) config.yml рядом с пакетом
    Поверх файла — переопределения из env (GESTU_HOLD_MS и т.д.).
    """
    env_path = os.getenv("GESTU_CONFIG_PATH", "").strip()
    config_path = Path(path or env_path or DEFAULT_CONFIG_PATH).expanduser()

    raw = _apply_env(_load_yaml(config_path))
    cfg = AppConfig(
        timing=_section(raw, "timing", TimingConfig),
        classifier=_section(raw, "classifier", ClassifierConfig),
        landmarker=_section(raw, "landmarker", LandmarkerConfig),
        ws=_section(raw, "ws", WsConfig),
    )
    return validate(cfg)


MODEL_FILENAME = "hand_landmarker.task"


def resolve_model_path(path: Optional[str] = None) -> Path:
    """
    Файл модели MediaPipe, по тому же принципу, что и load_config:
      1) явный аргумент path
      2) env GESTU_HAND_TASK_PATH
      3) hand_landmarker.task в текущей директории, затем рядом с пакетом
    Явно заданный путь обязан существовать, без подстановки дефолта.
    """
    pinned = path or os.getenv("GESTU_HAND_TASK_PATH", "").strip()
    if pinned:
        p = Path(pinned).expanduser()
        if not p.is_file():
            raise ConfigurationError(f"модель HandLandmarker не найдена: {p}")
        return p.resolve()

    package_dir = Path(__file__).resolve().parent
    for candidate in (Path.cwd() / MODEL_FILENAME, package_dir.parent / MODEL_FILENAME):
        if candidate.is_file():
            return candidate.resolve()
    raise ConfigurationError(
        f"{MODEL_FILENAME} не найден ни в {Path.cwd()}, ни в {package_dir.parent}; "
        f"задай GESTU_HAND_TASK_PATH"
    )
