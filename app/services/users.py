from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.user import User
from app.services.errors import NotFound


async def ensure_user(
	session: AsyncSession,
	user_id: int,
	first_name: str | None = None,
	last_name: str | None = None,
) -> User:
	res = await session.execute(select(User).where(User.id == user_id))
	user = res.scalars().first()
	if user is None:
		user = User(
			id=user_id,
			first_name=first_name,
			last_name=last_name,
			is_admin=user_id in settings.admin_id_set,
		)
		session.add(user)
	else:
		user.first_name = first_name or user.first_name
		user.last_name = last_name or user.last_name
	await session.commit()
	return user


async def set_phone(session: AsyncSession, user_id: int, phone: str) -> User:
	user = await session.get(User, user_id)
	if user is None:
		raise NotFound("User", user_id)
	user.phone = phone
	await session.commit()
	return user
