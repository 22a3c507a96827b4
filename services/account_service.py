from sqlalchemy import select

from database.models.customer import Customer
from database.models.user import User
from services.errors import NotFoundError
from services.lifecycle import LifecycleService


class AccountService(LifecycleService):
    """Связь учетной записи пользователя с профилем клиента"""

    async def get_customer_for_user(self, user_id: int) -> Customer:
        async with self.read_session() as session:
            result = await session.execute(
                select(Customer)
                .join(User, User.customer_id == Customer.id)
                .where(User.id == user_id, User.is_active.is_(True))
            )
            customer = result.scalar_one_or_none()

            if customer is None:
                raise NotFoundError(f"No customer profile linked to user {user_id}")
            return customer
