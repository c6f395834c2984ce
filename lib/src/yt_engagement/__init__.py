"""
YouTube 영상 메타데이터 평탄화 및 참여도 분석
"""

from yt_engagement.preprocessors.missing import MISSING, is_missing
from yt_engagement.preprocessors.flatten import RecordFlattener
from yt_engagement.preprocessors.table_assemble import AssemblyResult, TableAssembler

__version__ = '0.1.0'

__all__ = [
    'MISSING',
    'is_missing',
    'RecordFlattener',
    'TableAssembler',
    'AssemblyResult',
]
