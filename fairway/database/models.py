"""
SQLAlchemy ORM models for the Fairway golf social platform.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    Time,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fairway.database.db import Base


class ConnectionStatus(str, enum.Enum):
    """Connection status enum."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class TeeTimeStatus(str, enum.Enum):
    """Tee time status enum."""

    ACTIVE = "active"
    FULL = "full"
    CANCELLED = "cancelled"


class ApplicationStatus(str, enum.Enum):
    """Tee time application status enum."""

    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class AchievementType(str, enum.Enum):
    """Achievement counter types."""

    ROUNDS_PLAYED = "rounds_played"
    HOLE_IN_ONE = "hole_in_one"
    EAGLES = "eagles"
    BIRDIES = "birdies"


class NotificationType(str, enum.Enum):
    """Notification type enum (values understood by the notification service)."""

    CONNECTION_REQUEST = "connection_request"
    CONNECTION_ACCEPTED = "connection_accepted"
    NEW_MESSAGE = "new_message"
    TEE_TIME_APPLICATION = "tee_time_application"
    TEE_TIME_APPROVED = "tee_time_approved"


class User(Base):
    """User profiles, keyed by the identity provider's user id."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=True)
    username = Column(String, nullable=True, unique=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_users_username", "username"),
    )


class Connection(Base):
    """Connection between two users (either side may have requested it).

    user_low_id/user_high_id hold the normalized pair so the unique
    constraint covers both directions.
    """

    __tablename__ = "user_connections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    user_low_id = Column(Integer, nullable=False)
    user_high_id = Column(Integer, nullable=False)
    status = Column(String(20), default=ConnectionStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    responded_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    requester = relationship("User", foreign_keys=[requester_id])
    recipient = relationship("User", foreign_keys=[recipient_id])

    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_user_connections_pair"),
        CheckConstraint("user_low_id < user_high_id", name="ck_user_connections_pair_order"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'declined')",
            name="ck_user_connections_status",
        ),
        Index("idx_user_connections_requester", "requester_id"),
        Index("idx_user_connections_recipient_status", "recipient_id", "status"),
    )


class DirectMessage(Base):
    """Direct message between two users."""

    __tablename__ = "direct_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("length(trim(message)) > 0", name="ck_direct_messages_not_blank"),
        Index("idx_direct_messages_pair_created", "sender_id", "recipient_id", "created_at"),
        Index("idx_direct_messages_recipient_unread", "recipient_id", "is_read"),
    )


class TeeTime(Base):
    """Bookable tee time with a bounded roster."""

    __tablename__ = "tee_times"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_name = Column(String, nullable=False)
    tee_time_date = Column(Date, nullable=False)
    tee_time_time = Column(Time, nullable=False)
    max_players = Column(Integer, nullable=False)
    available_spots = Column(Integer, nullable=False)
    handicap_requirement = Column(String, default="Any level", nullable=False)
    description = Column(Text, default="", nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String(20), default=TeeTimeStatus.ACTIVE.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    creator = relationship("User", foreign_keys=[creator_id])
    applications = relationship(
        "TeeTimeApplication", back_populates="tee_time", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("max_players >= 1", name="ck_tee_times_max_players"),
        CheckConstraint(
            "available_spots >= 0 AND available_spots <= max_players",
            name="ck_tee_times_available_spots",
        ),
        CheckConstraint(
            "status IN ('active', 'full', 'cancelled')",
            name="ck_tee_times_status",
        ),
        Index("idx_tee_times_status_date", "status", "tee_time_date"),
        Index("idx_tee_times_creator", "creator_id"),
    )


class TeeTimeApplication(Base):
    """A user's request to join a tee time."""

    __tablename__ = "tee_time_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tee_time_id = Column(Integer, ForeignKey("tee_times.id", ondelete="CASCADE"), nullable=False)
    applicant_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String(20), default=ApplicationStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    responded_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    tee_time = relationship("TeeTime", back_populates="applications")
    applicant = relationship("User", foreign_keys=[applicant_id])

    __table_args__ = (
        UniqueConstraint("tee_time_id", "applicant_id", name="uq_tee_time_applications_tee_time_applicant"),
        Index("idx_tee_time_applications_tee_time_status", "tee_time_id", "status"),
        Index("idx_tee_time_applications_applicant", "applicant_id"),
    )


class GolfRound(Base):
    """A recorded round of golf."""

    __tablename__ = "golf_rounds"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    course_id = Column(Integer, nullable=True)  # Course catalog lives outside this service
    course_name = Column(String, nullable=False)
    date_played = Column(Date, nullable=False)
    total_score = Column(Integer, nullable=True)
    par = Column(Integer, nullable=True)
    holes_played = Column(Integer, nullable=True)
    weather_conditions = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    details = relationship(
        "GolfRoundDetail",
        back_populates="round",
        cascade="all, delete-orphan",
        order_by="GolfRoundDetail.hole_number",
    )

    __table_args__ = (
        Index("idx_golf_rounds_user_date", "user_id", "date_played"),
    )


class GolfRoundDetail(Base):
    """Per-hole results for a round."""

    __tablename__ = "golf_round_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    round_id = Column(Integer, ForeignKey("golf_rounds.id", ondelete="CASCADE"), nullable=False)
    hole_number = Column(Integer, nullable=False)
    par = Column(Integer, nullable=True)
    score = Column(Integer, nullable=True)
    putts = Column(Integer, nullable=True)
    fairway_hit = Column(Boolean, nullable=True)
    green_in_regulation = Column(Boolean, nullable=True)
    sand_saves = Column(Integer, default=0, nullable=False)

    # Relationships
    round = relationship("GolfRound", back_populates="details")

    __table_args__ = (
        UniqueConstraint("round_id", "hole_number", name="uq_golf_round_details_round_hole"),
    )


class UserAchievement(Base):
    """Derived achievement counters, one row per (user, type)."""

    __tablename__ = "user_achievements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    achievement_type = Column(String(50), nullable=False)  # AchievementType enum value
    value = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "achievement_type", name="uq_user_achievements_user_type"),
        CheckConstraint("value >= 0", name="ck_user_achievements_value"),
    )
