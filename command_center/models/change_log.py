# command_center/models/change_log.py
from datetime import datetime

from sqlalchemy import Integer, String, Text, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from command_center.db.base import Base


class ChangeLog(Base):
    __tablename__ = "changelog"

    # =========
    # 🔒 Immutable fields (no update, no delete)
    # =========
    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Change log UUID")

    timestamp: Mapped[str] = mapped_column(String(50), nullable=False, comment="Human-readable write time")

    user_email: Mapped[str] = mapped_column(String(255), nullable=False, comment="Acting identity at write time")

    project_id: Mapped[int] = mapped_column(Integer, nullable=False, comment="Project the change belongs to")

    project_info: Mapped[str] = mapped_column(String(512), nullable=False, comment="'utility - substation', frozen")

    action: Mapped[str] = mapped_column(String(100), nullable=False, comment="Action label")

    changes: Mapped[str] = mapped_column(Text, nullable=False, comment="' | '-joined diff fragments")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.now,
        server_default=func.now(),
        nullable=False,
        comment="Insertion time, used for newest-first ordering"
    )

    def __repr__(self) -> str:
        return (
            f"<ChangeLog project_id={self.project_id} "
            f"action={self.action}>"
        )
