from sqlalchemy import Column, ForeignKey, Integer, Text
from hrdocs.database import Base


class AccidentReport(Base):
    __tablename__ = "accident_report"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("company.id", ondelete="CASCADE"), nullable=False)
    employee_id = Column(Text, ForeignKey("employee.id", ondelete="CASCADE"), nullable=False)
    form_number = Column(Integer)
    medical_certificate_id = Column(Text, ForeignKey("employee_documents.id"), nullable=True)
    created_at = Column(Text, nullable=False)
    modified_at = Column(Text)
    modified_by = Column(Text)


class IllnessReport(Base):
    __tablename__ = "illness_report"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("company.id", ondelete="CASCADE"), nullable=False)
    employee_id = Column(Text, ForeignKey("employee.id", ondelete="CASCADE"), nullable=False)
    form_number = Column(Integer)
    medical_certificate_id = Column(Text, ForeignKey("employee_documents.id"), nullable=True)
    created_at = Column(Text, nullable=False)
    modified_at = Column(Text)
    modified_by = Column(Text)
