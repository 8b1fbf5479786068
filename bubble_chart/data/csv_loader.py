"""CSV 데이터 로딩 유틸.

- 헤더 행을 필드명으로 사용하고 모든 값을 원문 문자열로 읽는다.
- 숫자 변환은 normalizer가 담당한다.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from bubble_chart.models.errors import MissingParameterError
from bubble_chart.utils.logging import log_event


# 입력: 파일 경로, 구분자
# 출력: 실제 사용할 구분자
# 구분자가 없으면 확장자로 판단 (.tsv -> 탭, 그 외 -> 콤마)
def _resolve_delimiter(path: str, delimiter: Optional[str]) -> str:
    if delimiter:
        return delimiter
    suffix = Path(str(path).split("?", 1)[0]).suffix.lower()
    return "\t" if suffix in {".tsv", ".tab"} else ","


# 입력: 파일 경로(또는 URL), 구분자
# 출력: 행 목록 List[dict]
# 헤더 기준으로 각 행을 {필드명: 원문 문자열}로 반환
def load_rows(path: str, delimiter: Optional[str] = None) -> List[Dict[str, Any]]:
    """Read a delimited text file into a list of raw rows."""
    if not path:
        raise MissingParameterError("data source path is not set")

    sep = _resolve_delimiter(path, delimiter)
    df = pd.read_csv(path, sep=sep, dtype=str, keep_default_na=False)
    rows = df.to_dict(orient="records")
    log_event(
        "loader.read",
        {
            "path": str(path),
            "row_count": len(rows),
            "column_count": len(df.columns),
        },
    )
    return rows


async def fetch_rows(path: str, delimiter: Optional[str] = None) -> List[Dict[str, Any]]:
    """Read the whole dataset off the event loop; resumes once all rows are available."""
    return await asyncio.to_thread(load_rows, path, delimiter)
