from typing import Optional

from app.models.user import User, UserSkill
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    def get_by_email(self, email: str) -> Optional[User]:
        # Emails are stored lower-cased
        return self.query().filter(User.email == email.strip().lower()).first()

    def get_user_skill(self, user_id: int, skill_id: int) -> Optional[UserSkill]:
        return (
            self.db.query(UserSkill)
            .filter(UserSkill.user_id == user_id, UserSkill.skill_id == skill_id)
            .first()
        )
