"""레코드 평탄화 (RawRecord 1건 → FlatRow 1건)

1. 스키마 정렬: 알려진 하위 객체(statistics)의 기대 키를 MISSING으로 채움
2. 중첩 dict를 점 경로로 평탄화
3. 리스트 컬럼 분류 후 변환
   - 스칼라 리스트 → ScalarColumnCoercer (explode 지정 시 위치별 컬럼)
   - dict 리스트   → ArrayOfObjectsPivoter
4. 원래 키 순서 자리에 분해된 컬럼을 끼워 넣어 행 재조립
"""
from typing import Any, Dict, List, Mapping, Optional

import structlog

from yt_engagement.preprocessors.missing import MISSING, is_missing
from yt_engagement.preprocessors.pivot import ArrayOfObjectsPivoter
from yt_engagement.preprocessors.scalar_coerce import ScalarColumnCoercer
from yt_engagement.utils.exceptions import SchemaMismatch, ShapeMismatch
from yt_engagement.utils.flattener_helper import STATISTICS_FIELDS, flatten_mapping

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

FlatRow = Dict[str, Any]

SCALAR_LIST = 'scalar_list'
OBJECT_LIST = 'object_list'


def classify_list(values: List[Any], name: str) -> str:
    """리스트 셀 분류

    Raises:
        ShapeMismatch: dict와 비-dict 원소가 섞여 있을 때
    """
    mapping_count = sum(isinstance(v, dict) for v in values)
    if mapping_count == 0:
        return SCALAR_LIST
    if mapping_count == len(values):
        return OBJECT_LIST
    raise ShapeMismatch(name, f'{mapping_count} of {len(values)} elements are mappings')


class RecordFlattener:
    """레코드 평탄화 및 정규화"""

    def __init__(
        self,
        aligned_field: Optional[str] = 'statistics',
        expected_keys: Optional[List[str]] = None,
        explode_fields: Optional[Dict[str, str]] = None,
        list_separator: str = ', ',
        sep: str = '.',
    ):
        """
        Args:
            aligned_field: 기대 키 집합으로 정렬할 최상위 하위 객체 (None이면 정렬 생략)
            expected_keys: aligned_field의 기대 키 (기본값: statistics 필드)
            explode_fields: 위치별 컬럼으로 펼칠 스칼라 리스트 {경로: 컬럼 접두어}
            list_separator: 스칼라 리스트 결합 구분자
            sep: 경로 구분자
        """
        self.aligned_field = aligned_field
        self.expected_keys = list(expected_keys if expected_keys is not None else STATISTICS_FIELDS)
        self.explode_fields = dict(explode_fields or {})
        self.sep = sep
        self.coercer = ScalarColumnCoercer(separator=list_separator)
        self.pivoter = ArrayOfObjectsPivoter(coercer=self.coercer, sep=sep)

    def align(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """알려진 하위 객체의 빠진 기대 키를 MISSING으로 채운 사본 반환

        모르는 키는 그대로 통과. 필드 자체가 없으면 건드리지 않음.

        Raises:
            SchemaMismatch: 레코드나 하위 객체가 dict가 아니거나, 기대 키 값이 dict일 때
        """
        if not isinstance(record, Mapping):
            raise SchemaMismatch('<record>', f'expected mapping, got {type(record).__name__}')

        aligned = dict(record)
        field = self.aligned_field
        if not field or field not in aligned:
            return aligned

        sub = aligned[field]
        if sub is None:
            sub = {}
        if not isinstance(sub, Mapping):
            raise SchemaMismatch(field, f'expected mapping, got {type(sub).__name__}')

        filled = {key: sub.get(key, MISSING) for key in self.expected_keys}
        for key, value in filled.items():
            if isinstance(value, Mapping):
                raise SchemaMismatch(f'{field}.{key}', 'expected scalar, got mapping')
        for key, value in sub.items():
            if key not in filled:
                filled[key] = value
        aligned[field] = filled
        return aligned

    def flatten(self, record: Mapping[str, Any]) -> FlatRow:
        """레코드 1건 평탄화

        Raises:
            SchemaMismatch: 정렬 불가
            ShapeMismatch: 리스트 원소 형태 혼합, 컬럼명 충돌
        """
        flat = flatten_mapping(self.align(record), sep=self.sep)

        row: FlatRow = {}
        for key, value in flat.items():
            if isinstance(value, (list, tuple)):
                decomposed = self._decompose(key, list(value))
            elif key in self.explode_fields and is_missing(value):
                # null 리스트는 빈 리스트와 같은 컬럼 집합
                decomposed = self._decompose(key, [])
            else:
                decomposed = {key: [value]}

            for column, cells in decomposed.items():
                if column in row:
                    raise ShapeMismatch(column, 'duplicate column name after flattening')
                row[column] = cells[0]

        return row

    def _decompose(self, key: str, values: List[Any]) -> Dict[str, List[Any]]:
        kind = classify_list(values, key)
        if kind == OBJECT_LIST:
            return self.pivoter.pivot([values], key)
        if key in self.explode_fields:
            return self.coercer.coerce([values], key, explode=True, stem=self.explode_fields[key])
        return self.coercer.coerce([values], key)
