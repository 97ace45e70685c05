"""
메모 모델 - 사용자별 Markdown 메모
"""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid

from tagnote.core.database import Base, UUID, JSON


class Memo(Base):
    """메모 모델"""
    __tablename__ = "memos"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False, default="")
    content = Column(Text, nullable=False)  # Markdown
    category = Column(String(100), nullable=True, index=True)
    tags = Column(JSON(), nullable=True)  # ["#ui", "#research"] 순서 보존

    # 같은 초 안에 만든 메모도 최신순 정렬이 되도록 애플리케이션에서 기록
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)  # 첫 수정 전까지 NULL

    user = relationship("User", back_populates="memos")

    def __repr__(self):
        return f"<Memo(id={self.id}, title={self.title})>"
