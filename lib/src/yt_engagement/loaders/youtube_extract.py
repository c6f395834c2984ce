# ======================
# 표준 라이브러리
# ======================
from typing import Any, Dict, Iterable, List, Optional

# ======================
# 서드파티 라이브러리
# ======================
import requests
import structlog


class VideoExtractor:
    """YouTube Data API v3 videos 리소스 조회 (RawRecord 컬렉션 생성)"""

    DEFAULT_URL = 'https://www.googleapis.com/youtube/v3'
    DEFAULT_PARTS = ('snippet', 'contentDetails', 'statistics')
    MAX_IDS_PER_REQUEST = 50

    def __init__(
        self,
        api_key: str,
        session: requests.Session = None,
        url: str = DEFAULT_URL,
        timeout: int = 30,
    ):
        """Args:
            api_key: YouTube Data API 키
            session: HTTP 세션 (미지정 시 기본 Session 사용)
            url: API base URL
            timeout: 요청 타임아웃 (초)
        """
        if not api_key:
            raise ValueError('YouTube API key is required')
        self.api_key = api_key
        self.session = session or requests.Session()
        self.url = url.rstrip('/')
        self.timeout = timeout
        self.logger = structlog.get_logger(__name__)

    def _get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """videos 엔드포인트 호출

        Raises:
            requests.HTTPError: API 요청 실패 시
        """
        response = self.session.get(
            f'{self.url}/videos',
            params={**params, 'key': self.api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def fetch_videos(
        self, video_ids: Iterable[str],
        parts: Optional[Iterable[str]] = None,
        batch_size: int = MAX_IDS_PER_REQUEST,
    ) -> List[Dict[str, Any]]:
        """영상 ID 목록으로 items 조회 (batch_size개씩 나눠 요청)"""
        ids = [v for v in dict.fromkeys(video_ids) if v]
        part = ','.join(parts or self.DEFAULT_PARTS)
        batch_size = min(batch_size, self.MAX_IDS_PER_REQUEST)

        items: List[Dict[str, Any]] = []
        for start in range(0, len(ids), batch_size):
            batch = ids[start:start + batch_size]
            payload = self._get({'part': part, 'id': ','.join(batch)})
            items.extend(payload.get('items', []))
            self.logger.debug('videos batch fetched', requested=len(batch), received=len(payload.get('items', [])))

        self.logger.info('videos fetched', requested=len(ids), received=len(items))
        return items

    def fetch_chart(
        self, region: str = 'US', max_results: int = 200,
        parts: Optional[Iterable[str]] = None,
    ) -> List[Dict[str, Any]]:
        """인기 영상 차트(chart=mostPopular) 조회, nextPageToken으로 페이지 순회"""
        part = ','.join(parts or self.DEFAULT_PARTS)

        items: List[Dict[str, Any]] = []
        page_token = None
        while len(items) < max_results:
            params = {
                'part': part,
                'chart': 'mostPopular',
                'regionCode': region,
                'maxResults': min(self.MAX_IDS_PER_REQUEST, max_results - len(items)),
            }
            if page_token:
                params['pageToken'] = page_token

            payload = self._get(params)
            items.extend(payload.get('items', []))

            page_token = payload.get('nextPageToken')
            if not page_token:
                break

        self.logger.info('chart fetched', region=region, received=len(items))
        return items


if __name__ == '__main__':
    import os

    extractor = VideoExtractor(os.environ['YOUTUBE_API_KEY'])
    videos = extractor.fetch_chart(region='US', max_results=10)
    print(f"총 {len(videos)}개 영상 조회")
    for v in videos:
        print(f"  {v['id']}: {v['snippet']['title']}")
