"""JSON export 파일 ↔ RawRecord 컬렉션"""
import json
from pathlib import Path
from typing import Any, Dict, List, Union

import structlog

from yt_engagement.utils.exceptions import SchemaMismatch

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def load_records(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """{"items": [...]} 또는 레코드 리스트 JSON 파일 로드

    Raises:
        FileNotFoundError: 파일 없음
        SchemaMismatch: 최상위 구조가 items 컬렉션이 아닐 때
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        payload = json.load(f)

    if isinstance(payload, dict):
        if 'items' not in payload:
            raise SchemaMismatch('items', f'top-level object in {path.name} has no items collection')
        items = payload['items']
    else:
        items = payload

    if not isinstance(items, list):
        raise SchemaMismatch('items', f'expected list, got {type(items).__name__}')

    logger.info('records loaded', path=str(path), records=len(items))
    return items


def dump_records(items: List[Dict[str, Any]], path: Union[str, Path]) -> Path:
    """레코드 컬렉션을 {"items": [...]} 형식으로 저장"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump({'items': items}, f, ensure_ascii=False, indent=2)

    logger.info('records saved', path=str(path), records=len(items))
    return path
