# hash_password.py
"""
生成 LOGIN_PASSWORD_HASH
用法: python hash_password.py            （交互输入）
      python hash_password.py <password>
把输出写进 .env 的 LOGIN_PASSWORD_HASH
"""
import getpass
import sys

from command_center.services.auth_service import hash_password


def main():
    if len(sys.argv) > 1:
        password = sys.argv[1]
    else:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat: "):
            print("❌ 两次输入不一致")
            sys.exit(1)
    if not password:
        print("❌ 密码不能为空")
        sys.exit(1)
    print(f"LOGIN_PASSWORD_HASH={hash_password(password)}")


if __name__ == "__main__":
    main()
