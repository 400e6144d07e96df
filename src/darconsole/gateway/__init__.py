"""Dar Console Gateway -- FastAPI HTTP 入口"""
