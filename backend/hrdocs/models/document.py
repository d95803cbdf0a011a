from sqlalchemy import Column, ForeignKey, Integer, Text
from hrdocs.database import Base


class EmployeeDocument(Base):
    __tablename__ = "employee_documents"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("company.id", ondelete="CASCADE"), nullable=False)
    employee_id = Column(Text, ForeignKey("employee.id"), nullable=True)
    document_type = Column(Text, nullable=False)
    reference_type = Column(Text, nullable=False)
    reference_id = Column(Text, nullable=False)
    file_path = Column(Text, nullable=False)
    drive_id = Column(Text)
    item_id = Column(Text)
    file_url = Column(Text)
    share_url = Column(Text)
    file_name = Column(Text, nullable=False)
    mime_type = Column(Text)
    file_size_bytes = Column(Integer)
    file_hash = Column(Text)
    uploaded_by = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="active")
    created_at = Column(Text, nullable=False)
    deleted_at = Column(Text, nullable=True)
    deleted_by = Column(Text, nullable=True)
