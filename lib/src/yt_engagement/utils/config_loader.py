# utils/config_loader.py (범용 로더 - 저수준)
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

HOME_ENV = 'YT_ENGAGEMENT_HOME'


class ConfigLoader:
    """범용 YAML 설정 로더 (싱글톤)"""

    def __init__(self) -> None:
        self.project_root = self._find_project_root()
        self.config_dir = self.project_root / 'config'

    def _find_project_root(self) -> Path:
        """프로젝트 루트 자동 탐색

        우선순위:
        1. YT_ENGAGEMENT_HOME 환경변수
        2. config 디렉토리(flatten.yaml 포함)가 있는 가장 가까운 상위 디렉토리
        3. Fallback: 현재 작업 디렉토리
        """
        home = os.environ.get(HOME_ENV)
        if home:
            return Path(home)

        current = Path(__file__).resolve()
        for parent in current.parents:
            if (parent / 'config' / 'flatten.yaml').exists():
                return parent

        return Path.cwd()

    @lru_cache(maxsize=32)
    def load(self, config_name: str) -> Dict[Any, Any]:
        """YAML 파일 로드 및 캐싱

        Args:
            config_name: 'flatten', 'analysis', 'extract'

        Returns:
            파싱된 설정 딕셔너리
        """
        config_path = self.config_dir / f'{config_name}.yaml'

        if not config_path.exists():
            raise FileNotFoundError(f'Config not found: {config_path}')

        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}

        return self._replace_env_vars(config)

    def _replace_env_vars(self, config: Any) -> Any:
        """환경변수 치환 (재귀적)

        ${VAR_NAME} 형태를 실제 환경변수 값으로 치환. 없으면 None
        (API 키처럼 선택적으로 쓰이는 값이 있기 때문)
        """
        if isinstance(config, dict):
            return {k: self._replace_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [self._replace_env_vars(item) for item in config]
        elif isinstance(config, str) and config.startswith('${') and config.endswith('}'):
            return os.getenv(config[2:-1])

        return config


_loader = None


def _get_loader() -> ConfigLoader:
    global _loader
    if _loader is None:
        _loader = ConfigLoader()
    return _loader


def load_config(config_name: str) -> Dict[Any, Any]:
    """함수형 인터페이스"""
    return _get_loader().load(config_name)


def reset_loader() -> None:
    """루트 재탐색 (테스트에서 YT_ENGAGEMENT_HOME 변경 시)"""
    global _loader
    _loader = None


if __name__ == '__main__':
    from pprint import pprint
    pprint(load_config('flatten'))
