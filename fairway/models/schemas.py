"""
Pydantic models for API request/response validation.
"""

from datetime import date, time as time_type
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


class UserSummary(BaseModel):
    """Public profile fields attached to connections, messages and tee times."""

    id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None


# ============================================================================
# Connections
# ============================================================================


class ConnectionCreate(BaseModel):
    """Request to connect with another user."""

    model_config = ConfigDict(populate_by_name=True)
    recipient_id: Optional[int] = Field(default=None, alias="recipientId")


class ConnectionResponse(BaseModel):
    """Connection between two users."""

    id: int
    requester_id: int
    recipient_id: int
    status: str  # pending, accepted, or declined
    created_at: Optional[str] = None
    responded_at: Optional[str] = None
    requester: Optional[UserSummary] = None
    recipient: Optional[UserSummary] = None


class ConnectionResult(BaseModel):
    """Result of creating or responding to a connection."""

    message: str
    connection: ConnectionResponse


class ConnectionListResponse(BaseModel):
    """All connections for the current user."""

    connections: List[ConnectionResponse]


# ============================================================================
# Messages
# ============================================================================


class MessageCreate(BaseModel):
    """Request to send a direct message."""

    model_config = ConfigDict(populate_by_name=True)
    recipient_id: Optional[int] = Field(default=None, alias="recipientId")
    message: Optional[str] = None


class MessageResponse(BaseModel):
    """Direct message."""

    id: int
    sender_id: int
    recipient_id: int
    message: str
    is_read: bool
    read_at: Optional[str] = None
    created_at: Optional[str] = None
    sender: Optional[UserSummary] = None
    recipient: Optional[UserSummary] = None


class MessageSentResponse(BaseModel):
    """Result of sending a message."""

    model_config = ConfigDict(populate_by_name=True)
    message: str
    sent_message: MessageResponse = Field(alias="sentMessage")


class MessageListResponse(BaseModel):
    """A page of a conversation, newest first."""

    messages: List[MessageResponse]


class UnreadCountResponse(BaseModel):
    """Unread direct message count response."""

    count: int


# ============================================================================
# Tee times
# ============================================================================


class TeeTimeCreate(BaseModel):
    """Request to create a tee time."""

    model_config = ConfigDict(populate_by_name=True)
    course: Optional[str] = None
    tee_date: Optional[date] = Field(default=None, alias="date")
    tee_time: Optional[time_type] = Field(default=None, alias="time")
    max_players: Optional[int] = Field(default=None, alias="maxPlayers")
    handicap: Optional[str] = None
    description: Optional[str] = None


class TeeTimeResponse(BaseModel):
    """Tee time."""

    id: int
    course_name: str
    tee_time_date: str
    tee_time_time: str
    max_players: int
    available_spots: int
    handicap_requirement: str
    description: str
    creator_id: int
    status: str  # active, full, or cancelled
    created_at: Optional[str] = None
    creator: Optional[UserSummary] = None


class TeeTimeResult(BaseModel):
    """Single tee time result."""

    success: bool = True
    tee_time: TeeTimeResponse


class TeeTimeListResponse(BaseModel):
    """Tee time search results."""

    success: bool = True
    tee_times: List[TeeTimeResponse]


class ApplicationResponse(BaseModel):
    """Application to join a tee time."""

    id: int
    tee_time_id: int
    applicant_id: int
    status: str  # pending, approved, or declined
    created_at: Optional[str] = None
    responded_at: Optional[str] = None
    applicant: Optional[UserSummary] = None


class ApplicationResult(BaseModel):
    """Single application result."""

    success: bool = True
    application: ApplicationResponse


class ApplicationListResponse(BaseModel):
    """Roster of a tee time."""

    success: bool = True
    applications: List[ApplicationResponse]


class ApprovalResult(BaseModel):
    """Result of approving an application."""

    success: bool = True
    tee_time: TeeTimeResponse
    application: ApplicationResponse


# ============================================================================
# Golf rounds and achievements
# ============================================================================


class HoleDetail(BaseModel):
    """Per-hole result."""

    hole_number: Optional[int] = Field(default=None, ge=1, le=18)
    par: Optional[int] = Field(default=None, ge=3, le=6)
    score: Optional[int] = Field(default=None, ge=1)
    putts: Optional[int] = Field(default=None, ge=0)
    fairway_hit: Optional[bool] = None
    green_in_regulation: Optional[bool] = None
    sand_saves: Optional[int] = Field(default=0, ge=0)


class GolfRoundCreate(BaseModel):
    """Request to record a golf round."""

    user_id: Optional[int] = None
    course_id: Optional[int] = None
    course_name: Optional[str] = None
    date_played: Optional[date] = None
    total_score: Optional[int] = None
    par: Optional[int] = None
    holes_played: Optional[int] = Field(default=None, ge=1, le=18)
    weather_conditions: Optional[str] = None
    notes: Optional[str] = None
    hole_details: Optional[List[HoleDetail]] = None


class GolfRoundResponse(BaseModel):
    """Recorded golf round with hole details."""

    id: int
    user_id: int
    course_id: Optional[int] = None
    course_name: str
    date_played: str
    total_score: Optional[int] = None
    par: Optional[int] = None
    holes_played: Optional[int] = None
    weather_conditions: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    details: List[HoleDetail] = []


class GolfRoundResult(BaseModel):
    """Result of recording a round."""

    success: bool = True
    round: GolfRoundResponse
    message: str


class GolfRoundListResponse(BaseModel):
    """A user's rounds."""

    success: bool = True
    rounds: List[GolfRoundResponse]


class AchievementResponse(BaseModel):
    """Achievement counter."""

    user_id: int
    achievement_type: str
    value: int
    updated_at: Optional[str] = None


class AchievementListResponse(BaseModel):
    """A user's achievements."""

    success: bool = True
    achievements: List[AchievementResponse]
