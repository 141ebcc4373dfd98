"""ORM model for store ratings: at most one per (user, store)."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from storerate.models.base import Base, TimestampMixin, new_id

COMMENT_MAX_LEN = 500
RATING_MIN = 1
RATING_MAX = 5


class Rating(TimestampMixin, Base):
    """A 1-5 star rating with optional comment left by a user for a store."""

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "store_id", name="uq_ratings_user_store"),
        CheckConstraint(
            f"rating >= {RATING_MIN} AND rating <= {RATING_MAX}",
            name="ck_ratings_rating_range",
        ),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    store_id = Column(
        String(36),
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating = Column(Integer, nullable=False)
    comment = Column(String(COMMENT_MAX_LEN), nullable=True)

    user = relationship("User", back_populates="ratings")
    store = relationship("Store", back_populates="ratings")
