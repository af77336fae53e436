from command_center.db.session import get_engine
from command_center.db.base import Base


def init_db():
    # 导入所有表，确保注册到 Base.metadata
    from command_center.models.project import Project  # noqa: F401
    from command_center.models.change_log import ChangeLog  # noqa: F401

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
