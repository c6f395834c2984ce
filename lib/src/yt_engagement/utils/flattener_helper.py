from typing import Any, Dict, Mapping

from yt_engagement.preprocessors.missing import to_missing
from yt_engagement.utils.exceptions import SchemaMismatch

# ============================================
# YouTube videos.list 리소스 스키마 정의
# ============================================

STATISTICS_FIELDS = [
    'viewCount',
    'likeCount',
    'dislikeCount',
    'favoriteCount',
    'commentCount',
]

STRUCTURAL_PREFIXES = [
    'snippet',
    'statistics',
    'contentDetails',
    'status',
    'topicDetails',
    'player',
    'recordingDetails',
]


def flatten_mapping(nested: Mapping[str, Any], parent_key: str = '', sep: str = '.') -> Dict[str, Any]:
    """중첩 dict를 점 경로 키로 평탄화 (리스트는 그대로 둠)

    None은 MISSING으로 바뀐다. 빈 dict는 컬럼을 만들지 않는다.
    같은 경로가 두 번 나오면 (예: 'a.b' 키와 {'a': {'b': ..}}) SchemaMismatch.

    Examples:
        >>> flatten_mapping({'a': {'b': 1, 'c': [1, 2]}})
        {'a.b': 1, 'a.c': [1, 2]}
    """
    items: Dict[str, Any] = {}
    for k, v in nested.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else str(k)

        if isinstance(v, Mapping):
            children = flatten_mapping(v, new_key, sep)
        else:
            children = {new_key: to_missing(v)}

        for key, value in children.items():
            if key in items:
                raise SchemaMismatch(key, 'duplicate path after flattening')
            items[key] = value
    return items
