# app/models/file.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import Base, utcnow

FILE_STATUS_UPLOADING = "uploading"
FILE_STATUS_PROCESSED = "processed"
FILE_STATUS_ERROR = "error"

class File(Base):
    __tablename__ = "files"
    
    id = Column(String, primary_key=True, index=True)  # UUID as string
    filename = Column(String, nullable=False)  # Name of the locally staged copy
    original_name = Column(String, nullable=False)
    mime_type = Column(String, nullable=False)
    size = Column(Integer, nullable=False)
    openai_file_id = Column(String, index=True)  # Set once the Files API accepted the upload
    status = Column(String, nullable=False, default=FILE_STATUS_UPLOADING)
    error_message = Column(String)
    project_id = Column(String, ForeignKey("projects.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    
    # Relationship
    project = relationship("Project", back_populates="files")
