"""
数据库自动初始化检查模块
在应用启动时自动检查并执行必要的初始化步骤：建表，空库时按 SEED_FILE 导入项目
"""
import os

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from command_center.db.init_db import init_db
from command_center.db.session import get_engine, get_session
from command_center.errors import BackendError
from command_center.logger import get_logger

logger = get_logger(__name__)


def check_tables_exist() -> bool:
    """检查数据库表是否存在"""
    try:
        tables = inspect(get_engine()).get_table_names()
    except SQLAlchemyError as e:
        logger.error(f"检查数据库表失败: {e}")
        return False
    return "projects" in tables and "changelog" in tables


def seed_if_empty(seed_file: str) -> int:
    """记录库为空且配置了 SEED_FILE 时导入项目，返回导入条数"""
    from command_center.services.backend import SqlBackend
    from command_center.services.report_service import seed_projects

    if not seed_file:
        return 0
    if not os.path.exists(seed_file):
        logger.warning(f"SEED_FILE not found, skipping: {seed_file}")
        return 0

    db = get_session()
    try:
        backend = SqlBackend(db)
        if backend.list_projects():
            logger.info("Projects already present, skipping seed")
            return 0
        return seed_projects(backend, seed_file)
    finally:
        db.close()


def auto_init(seed_file: str = "") -> None:
    """
    自动初始化检查
    如果数据库未初始化，自动建表；空库时可选导入种子数据
    """
    logger.info("检查数据库初始化状态...")

    if not check_tables_exist():
        logger.info("数据库表不存在，正在创建...")
        try:
            init_db()
        except SQLAlchemyError as e:
            logger.error(f"数据库表创建失败: {e}")
            raise
        logger.info("数据库表创建成功")
    else:
        logger.info("数据库表已存在")

    try:
        seed_if_empty(seed_file)
    except (BackendError, ValueError) as e:
        logger.error(f"导入种子数据失败: {e}")
        raise

    logger.info("数据库初始化检查完成")
