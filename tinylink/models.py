from sqlalchemy import Column, DateTime, Integer, String, func

from tinylink.database import Base


class Link(Base):
    __tablename__ = "links"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(8), unique=True, index=True, nullable=False)
    target_url = Column(String(2048), nullable=False)
    total_clicks = Column(Integer, nullable=False, default=0, server_default="0")
    last_clicked_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
