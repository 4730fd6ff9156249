import uuid

from sqlalchemy.orm import Session
from iam.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: uuid.UUID) -> User | None:
        """Get user by ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> User | None:
        """Get user by email (emails are stored lower-cased)"""
        return self.db.query(User).filter(User.email == email.lower()).first()

    def create(self, user: User) -> User:
        """
        Create a new user.

        Args:
            user: User object to create

        Returns:
            Created User object with ID populated

        Raises:
            IntegrityError: If email already exists
        """
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
