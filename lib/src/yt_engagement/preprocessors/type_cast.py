"""
타입 변환 모듈

- 숫자형 패턴 컬럼 → Int64 (파싱 실패 셀은 null + ValueCoercionError 기록)
- 게시 시각 문자열 → UTC Datetime 파생 컬럼
"""
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

import polars as pl
import structlog
from dateutil import parser as date_parser

from yt_engagement.utils.exceptions import ValueCoercionError
from yt_engagement.utils.helpers import compile_patterns, matches_any

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

DATETIME_DTYPE = pl.Datetime(time_unit='us', time_zone='UTC')

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


def parse_integer(value: Any) -> int:
    """'123', 123, '1.0' → 정수 (Int64 범위)

    Raises:
        ValueError: 정수로 해석할 수 없거나 Int64 범위를 벗어난 값
    """
    number = _parse_integer(value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise ValueError(f'out of Int64 range: {value!r}')
    return number


def _parse_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f'boolean is not a count: {value!r}')
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValueError(f'non-integral number: {value!r}')

    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        number = float(text)
        if not number.is_integer():
            raise ValueError(f'non-integral number: {value!r}')
        return int(number)


def parse_timestamp(value: Any) -> datetime:
    """ISO-8601 문자열 → tz 없는 UTC datetime (tz 없는 입력은 UTC로 간주)

    Raises:
        ValueError: 파싱 불가
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = date_parser.isoparse(str(value).strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def numeric_columns(df: pl.DataFrame, patterns: Sequence[str]) -> List[str]:
    """숫자형 패턴에 매칭되는 컬럼명"""
    regexes = compile_patterns(patterns)
    return [c for c in df.columns if matches_any(c, regexes)]


def _identifier_at(df: pl.DataFrame, id_col: Optional[str], row: int) -> Optional[str]:
    if id_col and id_col in df.columns:
        value = df[id_col][row]
        return None if value is None else str(value)
    return None


def cast_numeric_columns(
    df: pl.DataFrame,
    patterns: Sequence[str],
    id_col: Optional[str] = None,
) -> Tuple[pl.DataFrame, List[ValueCoercionError]]:
    """패턴 매칭 컬럼을 Int64로 변환

    Returns:
        (변환된 새 DataFrame, 셀 단위 변환 오류 리스트)
    """
    errors: List[ValueCoercionError] = []
    casted = []

    for col in numeric_columns(df, patterns):
        if df[col].dtype.is_integer():
            continue

        values = []
        for row, value in enumerate(df[col].to_list()):
            if value is None or value == '':
                values.append(None)
                continue
            try:
                values.append(parse_integer(value))
            except ValueError:
                errors.append(ValueCoercionError(col, row, value, _identifier_at(df, id_col, row)))
                values.append(None)
        casted.append(pl.Series(col, values, dtype=pl.Int64))

    if errors:
        logger.warning(
            'numeric coercion errors',
            count=len(errors),
            columns=sorted({e.column for e in errors}),
        )
    logger.debug('numeric columns cast', columns=[s.name for s in casted])

    return (df.with_columns(casted) if casted else df), errors


def derive_timestamp(
    df: pl.DataFrame,
    source: str,
    target: str,
    id_col: Optional[str] = None,
) -> Tuple[pl.DataFrame, List[ValueCoercionError]]:
    """게시 시각 컬럼에서 UTC Datetime 컬럼 파생

    source == target이면 제자리 변환. source 컬럼이 없으면 그대로 반환.

    Returns:
        (새 DataFrame, 파싱 실패 리스트)
    """
    if source not in df.columns:
        logger.warning('timestamp source column not found', source=source)
        return df, []

    if df[source].dtype == DATETIME_DTYPE:
        return df.with_columns(pl.col(source).alias(target)), []

    errors: List[ValueCoercionError] = []
    values = []
    for row, value in enumerate(df[source].to_list()):
        if value is None or value == '':
            values.append(None)
            continue
        try:
            values.append(parse_timestamp(value))
        except (ValueError, OverflowError):
            errors.append(ValueCoercionError(source, row, value, _identifier_at(df, id_col, row)))
            values.append(None)

    series = pl.Series(target, values, dtype=pl.Datetime(time_unit='us')).dt.replace_time_zone('UTC')

    if errors:
        logger.warning('invalid timestamps', source=source, count=len(errors))

    return df.with_columns(series), errors
