"""Repository for Landlord model operations."""

import uuid

from sqlalchemy.orm import Session
from iam.models.landlord import Landlord


class LandlordRepository:
    """Repository for Landlord model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, landlord_id: uuid.UUID) -> Landlord | None:
        """Get landlord by ID"""
        return self.db.query(Landlord).filter(Landlord.id == landlord_id).first()

    def get_by_name(self, name: str) -> Landlord | None:
        """Get landlord by its unique name"""
        return self.db.query(Landlord).filter(Landlord.name == name).first()

    def get_all(self) -> list[Landlord]:
        """Get all landlords ordered by name"""
        return self.db.query(Landlord).order_by(Landlord.name).all()

    def create(self, landlord: Landlord) -> Landlord:
        """Create new landlord"""
        self.db.add(landlord)
        self.db.commit()
        self.db.refresh(landlord)
        return landlord

    def delete(self, landlord: Landlord) -> None:
        """Delete landlord (caller must ensure it has no dependents)"""
        self.db.delete(landlord)
        self.db.commit()
