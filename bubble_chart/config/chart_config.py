"""차트 기본값 로딩 유틸."""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Tuple

from dotenv import load_dotenv

# Load project-level .env regardless of current working directory.
_DOTENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_DOTENV_PATH)


def _env_bool(name: str, default: bool = True) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int, *, minimum: int = 1) -> int:
    raw = str(os.getenv(name, "")).strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, value)


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = str(os.getenv(name, "")).strip()
    items = [item.strip() for item in raw.split(",") if item.strip()]
    return items or list(default)


def _env_bounds(name: str, default: Tuple[float, float]) -> Tuple[float, float]:
    # "5,30" 형태의 두 값만 허용, 그 외는 기본값
    items = _env_list(name, [])
    if len(items) != 2:
        return default
    try:
        return (float(items[0]), float(items[1]))
    except ValueError:
        return default


# 캔버스 크기(px)
CHART_WIDTH = _env_int("BUBBLE_CHART_WIDTH", 960)
CHART_HEIGHT = _env_int("BUBBLE_CHART_HEIGHT", 640)
CHART_PADDING = _env_int("BUBBLE_CHART_PADDING", 60, minimum=0)
TICK_COUNT = _env_int("BUBBLE_TICK_COUNT", 10)

# 색상/크기 스케일 기본값
DEFAULT_COLOR_SCALE = _env_list("BUBBLE_DEFAULT_COLOR_SCALE", ["red", "blue"])
DEFAULT_SIZE_SCALE = _env_bounds("BUBBLE_DEFAULT_SIZE_SCALE", (5.0, 30.0))
UNKNOWN_COLOR = str(os.getenv("BUBBLE_UNKNOWN_COLOR", "gray")).strip() or "gray"

# 렌더링 옵션
STATIC_IMAGE_ENABLED = _env_bool("BUBBLE_STATIC_IMAGE", True)
PLOT_TEMPLATE = str(os.getenv("BUBBLE_PLOT_TEMPLATE", "plotly_white")).strip() or "plotly_white"
FONT_FAMILY = str(
    os.getenv(
        "BUBBLE_PLOT_FONT_FAMILY",
        "Pretendard, Noto Sans KR, Apple SD Gothic Neo, Segoe UI, sans-serif",
    )
).strip()

# API
MAX_ROWS = _env_int("BUBBLE_MAX_ROWS", 10000)
CORS_ALLOW_ORIGINS = _env_list(
    "CORS_ALLOW_ORIGINS",
    ["http://localhost:3000", "http://127.0.0.1:3000"],
)
