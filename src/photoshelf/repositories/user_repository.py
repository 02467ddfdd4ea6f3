import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from photoshelf.models.user import User
from photoshelf.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository):
    def create_user(self, email: str) -> User:
        user = User(id=uuid.uuid4(), email=email)
        self.db.add(user)
        try:
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise
        return user

    def get_user_by_id(self, user_id: uuid.UUID) -> User | None:
        stmt = select(User).where(User.id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()
