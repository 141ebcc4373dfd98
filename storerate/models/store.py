"""ORM model for rated stores."""

from sqlalchemy import Column, Float, ForeignKey, String
from sqlalchemy.orm import relationship

from storerate.models.base import Base, TimestampMixin, new_id


class Store(TimestampMixin, Base):
    """
    A store owned by a STORE_OWNER user.

    avg_rating is a cached aggregate of the store's ratings, written only by
    storerate.services.ratings.recompute_store_average.
    """

    __tablename__ = "stores"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(60), nullable=False, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    address = Column(String(400), nullable=False)
    owner_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    avg_rating = Column(Float, nullable=False, default=0.0, server_default="0")

    owner = relationship("User", back_populates="owned_stores")
    ratings = relationship(
        "Rating",
        back_populates="store",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
