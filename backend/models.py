from sqlalchemy import Column, String, Float, Text, DateTime, JSON, func
from database import Base


class ProductionRecordRow(Base):
    __tablename__ = "production_records"

    id = Column(String, primary_key=True, index=True)
    date = Column(String, nullable=False, index=True)  # literal report text, e.g. "01 Jan 2024"
    total_production = Column(Float, nullable=False, default=0)
    body = Column(JSON, nullable=False)  # full record, camelCase wire shape
    created_at = Column(String, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class RFTReportRow(Base):
    __tablename__ = "rft_records"

    id = Column(String, primary_key=True, index=True)
    date = Column(String, nullable=False, index=True)
    unit = Column(String, nullable=True)
    body = Column(JSON, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class AppSettingRow(Base):
    __tablename__ = "app_settings"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
