"""Create an admin login, or promote an existing one.

Usage: python create_admin.py <email> [password] [name]
"""
import asyncio
import secrets
import sys

from fintrack.core.database import async_session_maker, init_db
from fintrack.core.permissions import Role
from fintrack.services.users import UserService


async def main(email: str, password: str, name: str) -> None:
    await init_db()
    async with async_session_maker() as db:
        service = UserService(db)
        user = await service.get_by_email(email)

        if user:
            app_user = await service.ensure_app_user(user)
            print(f"👤 Promoting existing user {user.email} (was {app_user.role})")
            app_user.role = Role.ADMIN.value
            app_user.is_active = True
            await db.commit()
        else:
            user = await service._create_identity(email, name, password)
            await service.ensure_app_user(user, role=Role.ADMIN)
            await db.commit()
            print(f"👤 Created admin {user.email} with password: {password}")

        print("✅ Success! Admin rights granted.")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    email_arg = sys.argv[1]
    password_arg = sys.argv[2] if len(sys.argv) > 2 else secrets.token_urlsafe(12)
    name_arg = sys.argv[3] if len(sys.argv) > 3 else "Admin"
    asyncio.run(main(email_arg, password_arg, name_arg))
