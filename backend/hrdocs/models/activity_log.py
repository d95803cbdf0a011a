from sqlalchemy import JSON, Column, Text
from hrdocs.database import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False)
    company_id = Column(Text)
    activity_type = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    old_value = Column(JSON)
    new_value = Column(JSON)
    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSON)
    ip_address = Column(Text)
    user_agent = Column(Text)
    created_at = Column(Text, nullable=False)
