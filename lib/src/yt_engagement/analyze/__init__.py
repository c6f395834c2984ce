"""참여도 분석 (통계, 그래프)"""
