"""VideoTable CSV 저장 / 로드

null은 빈 필드, Datetime은 ISO-8601(UTC, 'Z')로 기록한다.
로드 시 모든 컬럼을 문자열로 읽은 뒤 조립 때와 같은 타입 변환을 다시 적용한다.
"""
from pathlib import Path
from typing import Optional, Sequence, Union

import polars as pl
import structlog

from yt_engagement.preprocessors.type_cast import cast_numeric_columns, derive_timestamp
from yt_engagement.utils.helpers import compile_patterns, ensure_list, matches_any

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

ISO_FORMAT = '%Y-%m-%dT%H:%M:%S%.6fZ'


def write_table(df: pl.DataFrame, path: Union[str, Path]) -> Path:
    """헤더 포함 CSV로 저장"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    rendered = df.with_columns([
        pl.col(name).dt.convert_time_zone('UTC').dt.strftime(ISO_FORMAT)
        if dtype.time_zone else pl.col(name).dt.strftime(ISO_FORMAT)
        for name, dtype in df.schema.items()
        if isinstance(dtype, pl.Datetime)
    ])
    rendered.write_csv(path)

    logger.info('table saved', path=str(path), rows=df.height, columns=df.width)
    return path


def read_table(
    path: Union[str, Path],
    numeric_patterns: Sequence[str] = (),
    timestamp_cols: Sequence[str] = (),
    float_patterns: Sequence[str] = (),
    bool_cols: Sequence[str] = (),
    id_col: Optional[str] = None,
) -> pl.DataFrame:
    """CSV 로드 후 타입 복원

    Args:
        path: CSV 경로
        numeric_patterns: Int64로 복원할 컬럼 패턴
        timestamp_cols: UTC Datetime으로 복원할 컬럼
        float_patterns: Float64로 복원할 컬럼 패턴 (비율 컬럼 등)
        bool_cols: Boolean으로 복원할 컬럼
        id_col: 오류 보고용 식별자 컬럼
    """
    df = pl.read_csv(path, infer_schema_length=0)

    df, errors = cast_numeric_columns(df, numeric_patterns, id_col)
    for col in ensure_list(timestamp_cols):
        df, ts_errors = derive_timestamp(df, col, col, id_col)
        errors.extend(ts_errors)

    float_regexes = compile_patterns(float_patterns)
    df = df.with_columns([
        pl.col(c).cast(pl.Float64, strict=False)
        for c in df.columns if matches_any(c, float_regexes)
    ])
    df = df.with_columns([
        pl.col(c).str.to_lowercase().replace_strict(
            {'true': True, 'false': False}, default=None, return_dtype=pl.Boolean
        )
        for c in ensure_list(bool_cols) if c in df.columns
    ])

    logger.info('table loaded', path=str(path), rows=df.height, columns=df.width, errors=len(errors))
    return df
