"""스칼라 / 스칼라 리스트 컬럼 변환

- 기본: 행마다 하나의 문자열 셀 (리스트는 구분자로 결합)
- explode=True: 리스트 위치별 컬럼 ({stem}_1, {stem}_2, ...)으로 전치
"""
from typing import Any, Dict, List, Optional, Sequence

import structlog

from yt_engagement.preprocessors.missing import MISSING, is_missing
from yt_engagement.utils.exceptions import ShapeMismatch

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def render_scalar(value: Any) -> str:
    """스칼라 값을 문자열로 (bool은 JSON 표기)"""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class ScalarColumnCoercer:
    """중첩 dict가 없는 컬럼을 행당 스칼라 셀로 변환"""

    def __init__(self, separator: str = ', '):
        self.separator = separator

    def coerce(
        self,
        values: Sequence[Any],
        name: str,
        explode: bool = False,
        stem: Optional[str] = None,
    ) -> Dict[str, List[Any]]:
        """컬럼 변환

        Args:
            values: 행별 셀 (스칼라, 스칼라 리스트, None/MISSING)
            name: 원본 컬럼명
            explode: True면 위치별 컬럼으로 전치
            stem: explode 시 컬럼명 접두어 (미지정 시 name)

        Returns:
            {컬럼명: 행별 값 리스트}. 모든 리스트 길이는 len(values)

        Raises:
            ShapeMismatch: dict 또는 중첩 리스트 셀
        """
        cells = [self._check_cell(v, name) for v in values]

        if explode:
            return self._explode(cells, stem or name)

        return {name: [self._join(cell) for cell in cells]}

    def _check_cell(self, cell: Any, name: str) -> Any:
        if isinstance(cell, dict):
            raise ShapeMismatch(name, 'mapping cell routed to scalar coercion')
        if isinstance(cell, (list, tuple)):
            for item in cell:
                if isinstance(item, (dict, list, tuple)):
                    raise ShapeMismatch(
                        name, f'nested {type(item).__name__} inside scalar list'
                    )
            return list(cell)
        return cell

    def _join(self, cell: Any) -> Any:
        if is_missing(cell):
            return MISSING
        if isinstance(cell, list):
            parts = [render_scalar(v) for v in cell if not is_missing(v)]
            # 빈 리스트도 행은 유지, 값만 결측
            return self.separator.join(parts) if parts else MISSING
        return render_scalar(cell)

    def _explode(self, cells: List[Any], stem: str) -> Dict[str, List[Any]]:
        rows = []
        for cell in cells:
            if is_missing(cell):
                rows.append([])
            elif isinstance(cell, list):
                rows.append(cell)
            else:
                rows.append([cell])

        width = max((len(r) for r in rows), default=0)
        columns = {}
        for i in range(width):
            columns[f'{stem}_{i + 1}'] = [
                MISSING if i >= len(r) or is_missing(r[i]) else r[i]
                for r in rows
            ]

        logger.debug('scalar list exploded', column=stem, width=width, rows=len(rows))
        return columns
