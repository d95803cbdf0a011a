from sqlalchemy import Column, Integer, Text
from sqlalchemy.orm import relationship
from hrdocs.database import Base


class Company(Base):
    __tablename__ = "company"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    company_number = Column(Integer)
    created_at = Column(Text, nullable=False)

    employees = relationship("Employee", back_populates="company", cascade="all, delete-orphan")
