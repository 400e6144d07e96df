"""Dar Console -- 房地产开发运营控制台"""

__version__ = "0.1.0"
