# run.py
"""
run.py
标准 Flask 服务启动脚本（给开发者 / 运维 / CLI 用）
启动前建表，空库且配置了 SEED_FILE 时导入项目
"""
import os

from command_center.app_factory import create_app
from command_center.db.auto_init import auto_init


def main():
    # 1️创建 Flask app（同时确定数据库）
    app = create_app()

    # 2️启动前初始化数据库
    auto_init(app.config["SEED_FILE"])

    print("DB URI:", app.config["DATABASE_URL"])
    print("Auth mode:", app.config["AUTH_MODE"])

    # 3️启动参数
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 5000))
    debug = os.getenv("FLASK_DEBUG", "0") == "1"

    # 4️启动服务
    app.run(host=host, port=port, debug=debug, use_reloader=False)


if __name__ == "__main__":
    main()
