"""테이블 조립 (RawRecord 컬렉션 → VideoTable)

map: 레코드별 평탄화 (독립적, ProcessPoolExecutor 병렬 가능)
reduce: 합집합 → 컬럼명 정리 → 숫자 변환 → 시각 파생 → 중복 제거 (단일 스레드)
"""
import re
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from itertools import repeat
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import polars as pl
import structlog
from tqdm import tqdm

from yt_engagement.preprocessors.flatten import FlatRow, RecordFlattener
from yt_engagement.preprocessors.missing import MISSING, is_missing, to_null
from yt_engagement.preprocessors.row_filter import dedup_by_max, ensure_identifier
from yt_engagement.preprocessors.scalar_coerce import render_scalar
from yt_engagement.preprocessors.type_cast import cast_numeric_columns, derive_timestamp
from yt_engagement.utils.exceptions import FlattenError, ValueCoercionError
from yt_engagement.utils.flattener_helper import STRUCTURAL_PREFIXES
from yt_engagement.utils.helpers import validate_prefix

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

_POSITIONAL_RE = re.compile(r'_\d+$')

DEFAULT_NUMERIC_PATTERNS = [r'Count$', r'(^|\.)(width|height)(_\d+)?$']


@dataclass
class RecordFailure:
    position: int
    identifier: Optional[str]
    kind: str
    message: str

    def to_dict(self) -> dict:
        return self.__dict__


@dataclass
class AssemblyReport:
    input_records: int = 0
    flattened_rows: int = 0
    output_rows: int = 0
    duplicates_removed: int = 0
    failures: List[RecordFailure] = field(default_factory=list)
    coercion_errors: List[ValueCoercionError] = field(default_factory=list)
    timestamp_errors: List[ValueCoercionError] = field(default_factory=list)

    @property
    def failed_records(self) -> int:
        return len(self.failures)

    def summary(self) -> Dict[str, Any]:
        """배치 요약 (로그/CLI 출력용)"""
        return {
            'input_records': self.input_records,
            'flattened_rows': self.flattened_rows,
            'failed_records': self.failed_records,
            'failed_identifiers': [f.identifier or f'#{f.position}' for f in self.failures],
            'coercion_errors': len(self.coercion_errors),
            'timestamp_errors': len(self.timestamp_errors),
            'duplicates_removed': self.duplicates_removed,
            'output_rows': self.output_rows,
        }


@dataclass
class AssemblyResult:
    table: pl.DataFrame
    report: AssemblyReport


def _record_identifier(record: Any, id_col: str) -> Optional[str]:
    if isinstance(record, Mapping) and not is_missing(record.get(id_col)):
        return str(record.get(id_col))
    return None


def _flatten_one(
    flattener: RecordFlattener, position: int, record: Any, id_col: str
) -> Tuple[int, Optional[FlatRow], Optional[RecordFailure]]:
    """워커 함수: 레코드 1건 평탄화 (실패는 예외 대신 RecordFailure로 반환)"""
    try:
        return position, flattener.flatten(record), None
    except FlattenError as e:
        failure = RecordFailure(
            position=position,
            identifier=_record_identifier(record, id_col),
            kind=type(e).__name__,
            message=str(e),
        )
        return position, None, failure


def _to_text(value: Any) -> Optional[str]:
    """FlatRow 셀 → 문자열 셀 (MISSING, 빈 문자열은 null)"""
    value = to_null(value)
    if value is None:
        return None
    text = render_scalar(value)
    return text if text != '' else None


class TableAssembler:
    """레코드 컬렉션을 식별자당 1행 테이블로 조립"""

    def __init__(
        self,
        flattener: Optional[RecordFlattener] = None,
        id_col: str = 'id',
        metric_col: str = 'viewCount',
        prefixes: Sequence[str] = tuple(STRUCTURAL_PREFIXES),
        numeric_patterns: Sequence[str] = tuple(DEFAULT_NUMERIC_PATTERNS),
        timestamp_source: Optional[str] = 'publishedAt',
        timestamp_target: str = 'published_at',
        max_workers: int = 1,
        show_progress: bool = False,
    ):
        self.flattener = flattener or RecordFlattener()
        self.id_col = id_col
        self.metric_col = metric_col
        self.prefixes = [validate_prefix(p) for p in prefixes]
        self.numeric_patterns = list(numeric_patterns)
        self.timestamp_source = timestamp_source
        self.timestamp_target = timestamp_target
        self.max_workers = max_workers
        self.show_progress = show_progress

    # ==================== map ====================

    def flatten_all(self, records: Sequence[Any]) -> Tuple[List[FlatRow], List[RecordFailure]]:
        """레코드별 평탄화. 결과는 입력 순서 유지

        Returns:
            (성공한 FlatRow 리스트, 실패 리스트)
        """
        n = len(records)
        if self.max_workers and self.max_workers > 1 and n > 1:
            with ProcessPoolExecutor(max_workers=self.max_workers) as executor:
                chunksize = max(1, n // (self.max_workers * 4))
                results = list(tqdm(
                    executor.map(
                        _flatten_one, repeat(self.flattener), range(n), records,
                        repeat(self.id_col), chunksize=chunksize,
                    ),
                    total=n, desc='flatten', disable=not self.show_progress,
                ))
        else:
            results = [
                _flatten_one(self.flattener, i, record, self.id_col)
                for i, record in enumerate(tqdm(records, desc='flatten', disable=not self.show_progress))
            ]

        rows, failures = [], []
        for _, row, failure in results:
            if failure is not None:
                failures.append(failure)
            else:
                rows.append(row)

        for failure in failures:
            logger.warning('record flatten failed', **failure.to_dict())
        return rows, failures

    # ==================== reduce ====================

    def union(self, rows: Iterable[FlatRow]) -> List[FlatRow]:
        """모든 행이 같은 컬럼 집합을 갖도록 MISSING으로 채움 (첫 등장 순서)"""
        rows = list(rows)
        columns: Dict[str, None] = {}
        for row in rows:
            for column in row:
                columns.setdefault(column, None)

        columns = self._drop_shadowed(list(columns), rows)
        return [{c: row.get(c, MISSING) for c in columns} for row in rows]

    def _drop_shadowed(self, columns: List[str], rows: List[FlatRow]) -> List[str]:
        """빈 리스트에서 나온 전부-결측 컬럼이 같은 경로의 피벗 컬럼과 공존하면 제거"""
        sep = self.flattener.sep
        shadowed = []
        for column in columns:
            prefix = column + sep
            has_positional = any(
                other.startswith(prefix) and _POSITIONAL_RE.search(other) for other in columns
            )
            if has_positional and all(is_missing(row.get(column, MISSING)) for row in rows):
                shadowed.append(column)

        if shadowed:
            logger.debug('shadowed list columns dropped', columns=shadowed)
        return [c for c in columns if c not in shadowed]

    def to_frame(self, rows: List[FlatRow]) -> pl.DataFrame:
        """FlatRow 리스트 → 문자열 컬럼 DataFrame (MISSING은 null)"""
        if not rows:
            return pl.DataFrame(schema={self.id_col: pl.Utf8})
        columns = list(rows[0])
        return pl.DataFrame(
            {c: [_to_text(row[c]) for row in rows] for c in columns},
            schema={c: pl.Utf8 for c in columns},
        )

    def strip_prefix(self, column: str) -> str:
        """구조 prefix 제거 ('snippet.title' → 'title')"""
        name = column
        stripped = True
        while stripped:
            stripped = False
            for prefix in self.prefixes:
                if name.startswith(prefix) and len(name) > len(prefix):
                    name = name[len(prefix):]
                    stripped = True
                    break
        return name

    def rename(self, df: pl.DataFrame) -> pl.DataFrame:
        """구조 prefix 제거. 결과가 충돌하는 컬럼은 원래 이름 유지"""
        targets = {c: self.strip_prefix(c) for c in df.columns}

        counts: Dict[str, int] = {}
        for target in targets.values():
            counts[target] = counts.get(target, 0) + 1

        mapping = {}
        for column, target in targets.items():
            if target == column:
                continue
            if counts[target] > 1:
                logger.warning('rename collision, keeping dotted name', column=column, target=target)
                continue
            mapping[column] = target
        return df.rename(mapping)

    # ==================== 전체 ====================

    def assemble(self, records: Sequence[Any]) -> AssemblyResult:
        """레코드 컬렉션 → VideoTable

        Raises:
            MissingIdentifierError: 식별자 컬럼이 없거나 비어 있는 행이 있을 때
        """
        records = list(records)
        report = AssemblyReport(input_records=len(records))

        rows, report.failures = self.flatten_all(records)
        report.flattened_rows = len(rows)

        df = self.to_frame(self.union(rows))
        df = self.rename(df)
        ensure_identifier(df, self.id_col)

        df, report.coercion_errors = cast_numeric_columns(df, self.numeric_patterns, self.id_col)

        if self.timestamp_source:
            df, report.timestamp_errors = derive_timestamp(
                df, self.timestamp_source, self.timestamp_target, self.id_col
            )

        df, report.duplicates_removed = dedup_by_max(df, self.id_col, self.metric_col)
        report.output_rows = df.height

        logger.info('table assembled', columns=df.width, **report.summary())
        return AssemblyResult(table=df, report=report)
