from sqlalchemy import Column, ForeignKey, Text
from hrdocs.database import Base


class Receipt(Base):
    __tablename__ = "receipts"

    id = Column(Text, primary_key=True)
    company_id = Column(Text, ForeignKey("company.id", ondelete="CASCADE"), nullable=False)
    merchant_name = Column(Text)
    receipt_number = Column(Text)
    receipt_url = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    modified_at = Column(Text)
    modified_by = Column(Text)
