"""
전처리 모듈 (평탄화 코어 + 필터)

- missing: 명시적 결측 마커
- scalar_coerce / pivot / flatten: 레코드 평탄화
- table_assemble: 합집합, 컬럼명 정리, 타입 변환, 중복 제거
- keyword_filter: 키워드 매칭 플래그
"""
