from pathlib import Path

import pytest

from yt_engagement.pipelines import config as pipeline_config
from yt_engagement.utils import config_loader

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(autouse=True)
def project_config(monkeypatch):
    """저장소 루트의 config/*.yaml을 사용하도록 고정"""
    monkeypatch.setenv(config_loader.HOME_ENV, str(PROJECT_ROOT))
    config_loader.reset_loader()
    pipeline_config._config = None
    yield
    config_loader.reset_loader()
    pipeline_config._config = None


def make_video(
    video_id,
    views='100',
    likes='10',
    comments='1',
    title='Some title',
    description='Some description',
    tags=None,
    published='2021-03-04T05:06:07Z',
    **snippet_extra,
):
    """videos.list items 원소 형태의 레코드"""
    snippet = {
        'publishedAt': published,
        'channelId': 'UC123',
        'title': title,
        'description': description,
        'thumbnails': {
            'default': {'url': f'https://i.ytimg.com/vi/{video_id}/default.jpg', 'width': 120, 'height': 90},
        },
        'channelTitle': 'Channel',
        'localized': {'title': title, 'description': description},
    }
    if tags is not None:
        snippet['tags'] = tags
    snippet.update(snippet_extra)

    statistics = {'viewCount': views, 'likeCount': likes, 'favoriteCount': '0', 'commentCount': comments}
    return {
        'kind': 'youtube#video',
        'etag': f'etag-{video_id}',
        'id': video_id,
        'snippet': snippet,
        'contentDetails': {'duration': 'PT4M13S', 'definition': 'hd', 'caption': 'false'},
        'statistics': {k: v for k, v in statistics.items() if v is not None},
    }


@pytest.fixture
def video():
    return make_video


@pytest.fixture
def videos():
    return [
        make_video('V1', views='100', likes='5', title='Breaking news today', tags=['cnn', 'sports']),
        make_video('V2', views='2000', likes='150', title='Cooking pasta', tags=[]),
        make_video('V1', views='500', likes='40', title='Breaking news today (edited)', tags=['cnn', 'sports']),
        make_video('V3', views='50', likes='2', comments='0', title='Election night', tags=['politics']),
    ]
