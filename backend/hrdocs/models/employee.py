from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from hrdocs.database import Base


class Employee(Base):
    __tablename__ = "employee"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("company.id", ondelete="CASCADE"), nullable=False)
    first_name = Column(Text)
    last_name = Column(Text)
    employee_number = Column(Integer)
    created_at = Column(Text, nullable=False)

    company = relationship("Company", back_populates="employees")

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)
