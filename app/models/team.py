from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    # Zero or one manager (a user with role manager or hr)
    manager_id = Column(Integer, ForeignKey("users.id", use_alter=True, name="fk_team_manager_id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    manager = relationship("User", foreign_keys=[manager_id], back_populates="managed_teams")
    members = relationship("User", foreign_keys="User.team_id", back_populates="team")

    def __repr__(self):
        return f"<Team {self.id}: {self.name}>"
