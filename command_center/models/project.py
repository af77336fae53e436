# command_center/models/project.py
from command_center.db.base import Base
from typing import Optional

from sqlalchemy import Integer, String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column


class Project(Base):
    __tablename__ = "projects"
    # AUTOINCREMENT: 删除后的 id 不会被重新分配
    __table_args__ = {"sqlite_autoincrement": True}

    # =========
    # 🔒 Identity (backend assigned, never reused)
    # =========
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Project id")

    # =========
    # Classification / descriptive
    # =========
    category: Mapped[str] = mapped_column(String(50), nullable=False, comment="Pumping | Field Service | EHV")
    utility: Mapped[str] = mapped_column(String(255), nullable=False, comment="Utility name")
    substation: Mapped[str] = mapped_column(String(255), nullable=False, comment="Substation name")
    date_created: Mapped[str] = mapped_column(String(50), nullable=False, comment="Set once at creation")
    order_number: Mapped[str] = mapped_column(String(100), nullable=False, comment="Order number, may be non-numeric")
    status: Mapped[str] = mapped_column(String(20), nullable=False, comment="Active | Critical | Late | Done")
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="Percent 0-100")

    # =========
    # Optional columns (defaults applied by the mapping layer)
    # =========
    fat_date: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, comment="Loosely formatted FAT date")
    landing: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, comment="Loosely formatted landing date")
    lead: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, comment="Lead / PM")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    milestones: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, comment="{design, mat, fab, fat, ship}")
    punch_list: Mapped[Optional[list]] = mapped_column(JSON, nullable=True, comment="Punch list items with attachments")

    def __repr__(self) -> str:
        return f"<Project id={self.id} utility={self.utility} substation={self.substation}>"
