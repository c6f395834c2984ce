"""JSON export / YouTube API / CSV 입출력"""
