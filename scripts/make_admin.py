import asyncio
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.base import async_session_factory, init_db
from database.models.user import User, UserRole
from sqlalchemy import select


async def make_admin(username: str):
    """Назначить пользователя администратором"""
    await init_db()

    async with async_session_factory() as session:
        result = await session.execute(
            select(User).where(User.username == username)
        )
        user = result.scalar_one_or_none()

        if not user:
            print(f"❌ Пользователь {username} не найден в базе данных")
            return

        if user.is_admin:
            print(f"ℹ️ Пользователь {username} уже администратор")
            return

        old_role = user.role.value
        user.role = UserRole.ADMIN
        user.is_active = True

        await session.commit()

        print(f"✅ Пользователь {user.username} (ID: {user.id}) назначен администратором")
        print(f"🔄 Роль изменена: {old_role} → {user.role.value}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Использование: python scripts/make_admin.py <username>")
        sys.exit(1)
    asyncio.run(make_admin(sys.argv[1]))
