"""
API 미들웨어 모듈
"""
