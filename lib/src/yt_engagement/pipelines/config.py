"""
파이프라인 설정 관리

Flatten: flatten.yaml
Analysis: analysis.yaml
Extract: extract.yaml
"""
from typing import Dict, List, Optional

from yt_engagement.utils.config_loader import load_config


class FlattenConfig:
    """평탄화 / 테이블 조립 설정"""

    def __init__(self):
        self._flatten = load_config('flatten')

    @property
    def flatten(self) -> dict:
        return self._flatten

    def get_identifier(self) -> str:
        """중복 제거 식별자 컬럼"""
        return self._flatten['identifier']

    def get_engagement_metric(self) -> str:
        """중복 제거 순위 기준 지표"""
        return self._flatten['engagement_metric']

    def get_aligned_field(self) -> Optional[str]:
        """기대 키 정렬 대상 하위 객체"""
        return self._flatten.get('alignment', {}).get('field')

    def get_expected_keys(self) -> List[str]:
        """정렬 대상 하위 객체의 기대 키"""
        return self._flatten.get('alignment', {}).get('expected_keys', [])

    def get_structural_prefixes(self) -> List[str]:
        """컬럼명에서 제거할 구조 prefix"""
        return self._flatten.get('structural_prefixes', [])

    def get_explode_fields(self) -> Dict[str, str]:
        """위치별 컬럼으로 펼칠 스칼라 리스트"""
        return self._flatten.get('explode') or {}

    def get_list_separator(self) -> str:
        return self._flatten.get('list_separator', ', ')

    def get_path_separator(self) -> str:
        return self._flatten.get('path_separator', '.')

    def get_numeric_patterns(self) -> List[str]:
        """Int64로 변환할 컬럼명 패턴"""
        return self._flatten.get('numeric_patterns', [])

    def get_timestamp_source(self) -> Optional[str]:
        return self._flatten.get('timestamp', {}).get('source')

    def get_timestamp_target(self) -> str:
        return self._flatten.get('timestamp', {}).get('target', 'published_at')

    def get_max_workers(self) -> int:
        return self._flatten.get('parallel', {}).get('max_workers', 1)


class AnalysisConfig:
    """키워드 필터 / 참여도 분석 설정"""

    def __init__(self):
        self._analysis = load_config('analysis')

    @property
    def analysis(self) -> dict:
        return self._analysis

    def get_keyword_terms(self) -> List[str]:
        return self._analysis['keywords']['terms']

    def get_text_columns(self) -> List[str]:
        """키워드 검색 대상 컬럼 패턴"""
        return self._analysis['keywords']['text_columns']

    def get_flag_column(self) -> str:
        return self._analysis['keywords'].get('flag', 'matched')

    def get_ratio_denominator(self) -> str:
        return self._analysis['engagement'].get('denominator', 'viewCount')

    def get_ratio_metrics(self) -> List[str]:
        return self._analysis['engagement']['metrics']

    def get_percentiles(self) -> List[float]:
        return self._analysis['engagement'].get('percentiles', [0.25, 0.5, 0.75])

    def get_plot_figsize(self) -> tuple:
        return tuple(self._analysis.get('plot', {}).get('figsize', (12, 4)))


class ExtractConfig:
    """YouTube Data API 추출 설정"""

    def __init__(self):
        self._extract = load_config('extract')

    def get_url(self) -> str:
        return self._extract['url']

    def get_api_key(self) -> Optional[str]:
        """${YOUTUBE_API_KEY} 치환 결과 (미설정 시 None)"""
        return self._extract.get('api_key')

    def get_parts(self) -> List[str]:
        return self._extract['parts']

    def get_batch_size(self) -> int:
        return self._extract.get('batch_size', 50)

    def get_timeout(self) -> int:
        return self._extract.get('timeout', 30)

    def get_chart_region(self) -> str:
        return self._extract.get('chart', {}).get('region', 'US')

    def get_chart_max_results(self) -> int:
        return self._extract.get('chart', {}).get('max_results', 200)


class PipelineConfig:
    """전체 설정 묶음 (레이어별 lazy 로드)"""

    def __init__(self):
        self._flatten = None
        self._analysis = None
        self._extract = None

    @property
    def flatten(self) -> FlattenConfig:
        if self._flatten is None:
            self._flatten = FlattenConfig()
        return self._flatten

    @property
    def analysis(self) -> AnalysisConfig:
        if self._analysis is None:
            self._analysis = AnalysisConfig()
        return self._analysis

    @property
    def extract(self) -> ExtractConfig:
        if self._extract is None:
            self._extract = ExtractConfig()
        return self._extract


_config = None


def get_config() -> PipelineConfig:
    """전역 설정 인스턴스 반환 (싱글톤)"""
    global _config
    if _config is None:
        _config = PipelineConfig()
    return _config
