"""ORM model for single-use invitation codes."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from app.models.base import Base, utcnow


class InvitationCode(Base):
    """
    Invitation code issued by a member. Redeemable while not used and not expired;
    once used or expired it is terminal. Rows are never deleted.
    """

    __tablename__ = "invitation_codes"

    code = Column(String(32), primary_key=True)
    created_by_user_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)
    used_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    used_at = Column(DateTime(timezone=True), nullable=True)
