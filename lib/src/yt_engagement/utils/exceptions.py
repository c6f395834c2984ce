"""평탄화/테이블 조립 예외 정의

- ShapeMismatch, SchemaMismatch: 레코드 단위 실패 (수집 후 배치 요약으로 보고)
- ValueCoercionError: 셀 단위 실패 (결측 마커로 대체 후 계속)
- MissingIdentifierError: 테이블 단위 실패 (조립 중단)
"""
from typing import Any, Optional


class FlattenError(Exception):
    """평탄화 파이프라인 예외의 기반 클래스"""
    pass


class ShapeMismatch(FlattenError):
    """리스트 컬럼에 허용되지 않는 원소 형태가 섞여 있음 (예: dict와 스칼라 혼합)"""

    def __init__(self, column: str, detail: str):
        self.column = column
        self.detail = detail
        super().__init__(f"Shape mismatch in '{column}': {detail}")


class SchemaMismatch(FlattenError):
    """dict로 기대되는 필드가 스칼라 등으로 들어와 정렬(alignment)이 불가능함"""

    def __init__(self, field: str, detail: str):
        self.field = field
        self.detail = detail
        super().__init__(f"Schema mismatch in '{field}': {detail}")


class ValueCoercionError(FlattenError):
    """숫자형 컬럼의 파싱 불가 셀"""

    def __init__(self, column: str, row: int, value: Any, identifier: Optional[str] = None):
        self.column = column
        self.row = row
        self.value = value
        self.identifier = identifier
        super().__init__(f"Cannot coerce {value!r} in '{column}' (row {row})")


class MissingIdentifierError(FlattenError):
    """식별자 컬럼이 없거나 비어 있는 행이 존재"""

    def __init__(self, column: str, rows: Optional[list] = None):
        self.column = column
        self.rows = rows or []
        if self.rows:
            message = f"Identifier '{column}' missing in {len(self.rows)} row(s): {self.rows[:10]}"
        else:
            message = f"Identifier column '{column}' not found"
        super().__init__(message)
