import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON, Index
from sqlalchemy.sql import func
from resume_enhancer.db.base import Base


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    original_file_path = Column(String, nullable=True)
    processed_file_path = Column(String, nullable=True)
    resume_preview_json = Column(JSON, nullable=True)
    status = Column(String, nullable=False, default="uploaded")  # uploaded | processing | completed | failed
    enhancement_styles = Column(JSON, nullable=True, default=lambda: [])
    custom_instructions = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_resume_id_user", "id", "user_id"),
    )
