"""행 필터링 - 식별자 검증 및 중복 제거

식별자별로 참여 지표(viewCount)가 가장 큰 행 1개만 남긴다.
동률이면 먼저 들어온 행. 남은 행은 입력 순서를 유지한다.
"""
from typing import Tuple

import polars as pl
import structlog

from yt_engagement.utils.exceptions import MissingIdentifierError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

_ROW = '__row_nr'


def ensure_identifier(df: pl.DataFrame, id_col: str) -> pl.DataFrame:
    """식별자 컬럼 존재 및 결측 여부 검증

    Raises:
        MissingIdentifierError: 컬럼이 없거나 null/빈 문자열 행이 있을 때
    """
    if id_col not in df.columns:
        raise MissingIdentifierError(id_col)

    missing = (
        df.with_row_index(_ROW)
        .filter(pl.col(id_col).is_null() | (pl.col(id_col).cast(pl.Utf8) == ''))
        .get_column(_ROW)
        .to_list()
    )
    if missing:
        raise MissingIdentifierError(id_col, missing)
    return df


def dedup_by_max(df: pl.DataFrame, id_col: str, metric_col: str) -> Tuple[pl.DataFrame, int]:
    """식별자별 metric 최대 행만 유지

    Args:
        df: 입력 테이블 (변경하지 않음)
        id_col: 식별자 컬럼
        metric_col: 순위 기준 지표 컬럼 (null은 가장 낮은 순위)

    Returns:
        (중복 제거된 새 테이블, 제거된 행 수)
    """
    ensure_identifier(df, id_col)

    ranked = df.with_row_index(_ROW)
    if metric_col in df.columns:
        ranked = ranked.sort([metric_col, _ROW], descending=[True, False], nulls_last=True)
    else:
        logger.warning('dedup metric column not found, keeping first row', metric=metric_col)

    deduped = (
        ranked.unique(subset=[id_col], keep='first', maintain_order=True)
        .sort(_ROW)
        .drop(_ROW)
    )

    removed = df.height - deduped.height
    logger.info('dedup complete', id_col=id_col, metric=metric_col, rows=deduped.height, removed=removed)
    return deduped, removed
