"""dict 리스트 컬럼 → (key, position) 고정 폭 컬럼 피벗

각 행의 리스트 원소에 1부터 시작하는 위치 번호를 매기고,
모든 행/원소에서 처음 등장한 순서대로 키를 합집합으로 모은 뒤
"{name}.{key}_{position}" 컬럼을 만든다 (left join 정렬).
리스트가 짧거나 키가 없으면 MISSING. 원소 순서는 절대 바꾸지 않는다.
"""
from typing import Any, Dict, List, Sequence

import structlog

from yt_engagement.preprocessors.missing import MISSING, is_missing
from yt_engagement.preprocessors.scalar_coerce import ScalarColumnCoercer
from yt_engagement.utils.exceptions import ShapeMismatch
from yt_engagement.utils.flattener_helper import flatten_mapping

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class ArrayOfObjectsPivoter:
    """dict 리스트 컬럼 피벗"""

    def __init__(self, coercer: ScalarColumnCoercer = None, sep: str = '.'):
        self.coercer = coercer or ScalarColumnCoercer()
        self.sep = sep

    def pivot(self, cells: Sequence[Any], name: str) -> Dict[str, List[Any]]:
        """컬럼 피벗

        Args:
            cells: 행별 dict 리스트 (또는 None/MISSING)
            name: 원본 컬럼명 (출력 컬럼 접두어)

        Returns:
            {"{name}.{key}_{position}": 행별 값 리스트}, position 우선 순서

        Raises:
            ShapeMismatch: 리스트에 dict가 아닌 원소가 있을 때
        """
        rows = [self._normalize_cell(cell, name) for cell in cells]

        keys: Dict[str, None] = {}
        for elements in rows:
            for element in elements:
                for key in element:
                    keys.setdefault(key, None)

        width = max((len(elements) for elements in rows), default=0)

        columns: Dict[str, List[Any]] = {}
        for position in range(1, width + 1):
            for key in keys:
                columns[f'{name}{self.sep}{key}_{position}'] = [
                    elements[position - 1].get(key, MISSING)
                    if position <= len(elements) else MISSING
                    for elements in rows
                ]

        logger.debug(
            'list of objects pivoted',
            column=name, keys=len(keys), width=width, output_columns=len(columns),
        )
        return columns

    def _normalize_cell(self, cell: Any, name: str) -> List[Dict[str, Any]]:
        """셀을 평탄화된 dict 리스트로 정규화"""
        if is_missing(cell):
            return []
        if not isinstance(cell, (list, tuple)):
            raise ShapeMismatch(name, f'expected list of mappings, got {type(cell).__name__}')

        elements = []
        for position, element in enumerate(cell, start=1):
            if not isinstance(element, dict):
                raise ShapeMismatch(
                    name, f'element {position} is {type(element).__name__}, expected mapping'
                )
            elements.append(self._flatten_element(element, f'{name}[{position}]'))
        return elements

    def _flatten_element(self, element: Dict[str, Any], where: str) -> Dict[str, Any]:
        """원소 내부 dict는 점 경로로, 스칼라 리스트는 문자열로 결합"""
        flat = flatten_mapping(element, sep=self.sep)
        for key, value in flat.items():
            if isinstance(value, (list, tuple)):
                flat[key] = self.coercer.coerce([value], f'{where}.{key}')[f'{where}.{key}'][0]
        return flat
