"""
키워드 포함 여부 필터링

tags / description / title 텍스트 컬럼에서 대소문자 무시 부분 문자열 매칭.
컬럼은 정규표현식 패턴으로 지정 (예: '^tag_\\d+$'로 펼쳐진 태그 컬럼 전체)
"""
import re
from typing import List, Sequence

import polars as pl
import structlog

from yt_engagement.utils.helpers import compile_patterns, ensure_list, matches_any

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def build_keyword_pattern(terms: Sequence[str]) -> str:
    """키워드 리스트 → 대소문자 무시 alternation 정규식

    Raises:
        ValueError: 유효한 키워드가 없을 때
    """
    cleaned = [t.strip() for t in ensure_list(terms) if t and t.strip()]
    if not cleaned:
        raise ValueError('At least one keyword term is required')
    return '(?i)(' + '|'.join(re.escape(t) for t in cleaned) + ')'


def resolve_text_columns(df: pl.DataFrame, column_patterns: Sequence[str]) -> List[str]:
    """패턴에 매칭되는 텍스트 컬럼명 (테이블 컬럼 순서)"""
    regexes = compile_patterns(column_patterns)
    columns = [c for c in df.columns if matches_any(c, regexes)]
    if not columns:
        logger.warning('no text columns matched', patterns=list(column_patterns))
    return columns


def flag_keywords(
    df: pl.DataFrame,
    terms: Sequence[str],
    column_patterns: Sequence[str],
    flag: str = 'matched',
) -> pl.DataFrame:
    """텍스트 컬럼 중 하나라도 키워드를 포함하면 True인 boolean 컬럼 추가

    결측 텍스트는 불일치로 간주. 새 DataFrame 반환.
    """
    pattern = build_keyword_pattern(terms)
    columns = resolve_text_columns(df, column_patterns)

    if not columns:
        return df.with_columns(pl.lit(False).alias(flag))

    conditions = [
        pl.col(c).cast(pl.Utf8).str.contains(pattern).fill_null(False)
        for c in columns
    ]
    flagged = df.with_columns(pl.any_horizontal(conditions).alias(flag))

    matched = flagged.get_column(flag).sum()
    logger.info('keywords flagged', columns=columns, matched=matched, rows=flagged.height)
    return flagged


def filter_keywords(
    df: pl.DataFrame,
    terms: Sequence[str],
    column_patterns: Sequence[str],
) -> pl.DataFrame:
    """키워드가 매칭된 행만 유지"""
    flag = '__keyword_match'
    return (
        flag_keywords(df, terms, column_patterns, flag=flag)
        .filter(pl.col(flag))
        .drop(flag)
    )
