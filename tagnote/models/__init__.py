"""
모델 패키지
"""

from .user import User
from .memo import Memo

__all__ = [
    "User",
    "Memo",
]
