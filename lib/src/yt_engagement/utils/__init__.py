"""
유틸 모듈
"""
