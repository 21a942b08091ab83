"""
SIANI Wellness Service - API schemas.

Request and response DTOs for every router. Keys travel as camelCase on the
wire; request bodies also accept snake_case field names.
"""
from __future__ import annotations

import datetime as dt
from datetime import date, datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SleepQualityName = Literal["poor", "fair", "good", "excellent"]
SourceName = Literal["manual", "fitbit", "apple_health", "garmin", "samsung_health", "google_fit"]
SeverityName = Literal["low", "medium", "high", "urgent"]
PermissionLevelName = Literal["view_only", "limited", "full", "emergency_only"]


class ApiModel(BaseModel):
    """Base for all wire models: camelCase aliases, readable from ORM rows."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class EntityResponse(ApiModel):
    id: str
    created_at: datetime | None = None


class UserOwnedResponse(EntityResponse):
    user_id: str


class SuccessResponse(ApiModel):
    success: bool = True


# --- Mood ---


class MoodEntryCreate(ApiModel):
    mood: str = Field(..., min_length=1, max_length=32)
    notes: str | None = Field(default=None, max_length=2000)
    timestamp: datetime | None = None


class MoodEntryResponse(UserOwnedResponse):
    mood: str
    timestamp: datetime
    notes: str | None = None


class MoodTrendPoint(ApiModel):
    date: datetime
    mood: str
    notes: str | None = None


class MoodInsightsResponse(ApiModel):
    total_entries: int
    dominant_mood: str
    mood_distribution: dict[str, int]
    weekly_average: int
    last_week_count: int


class MoodAnalysisResponse(ApiModel):
    primary_mood: str
    intensity: int
    confidence: float
    emotional_tone: str
    stress_level: str
    energy_level: str
    social_connection: str
    triggers: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    needs_support: bool = False


# --- Daily actions and reflections ---


class DailyActionCreate(ApiModel):
    date: str = Field(..., description="Calendar date, YYYY-MM-DD")
    step_text: str = Field(..., min_length=1, max_length=500)
    completed: bool = False
    points: int = Field(default=5, ge=0, le=100)


class DailyActionUpdate(ApiModel):
    completed: bool


class DailyActionResponse(UserOwnedResponse):
    date: str
    step_text: str
    completed: bool
    points: int


class ReflectionCreate(ApiModel):
    date: str
    gratitude: str | None = Field(default=None, max_length=2000)
    success: str | None = Field(default=None, max_length=2000)
    improvement: str | None = Field(default=None, max_length=2000)


class ReflectionResponse(UserOwnedResponse):
    date: str
    gratitude: str | None = None
    success: str | None = None
    improvement: str | None = None


# --- Resources, care team and messages ---


class ResourceResponse(EntityResponse):
    title: str
    description: str
    category: str
    organization: str
    provider: str
    image_url: str | None = None
    average_rating: float
    rating_count: int


class ResourceRatingCreate(ApiModel):
    rating: int = Field(..., ge=1, le=5)
    review: str | None = Field(default=None, max_length=2000)


class ResourceRatingResponse(UserOwnedResponse):
    resource_id: str
    rating: int
    review: str | None = None


class CareTeamMemberCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    role: str = Field(..., min_length=1, max_length=128)
    organization: str = Field(..., min_length=1, max_length=255)
    image_url: str | None = None


class CareTeamMemberResponse(UserOwnedResponse):
    name: str
    role: str
    organization: str
    image_url: str | None = None
    date_added: datetime


class RatingResultResponse(ApiModel):
    rating: ResourceRatingResponse
    resource: ResourceResponse
    care_team_member: CareTeamMemberResponse | None = None


class MessageCreate(ApiModel):
    content: str = Field(..., min_length=1, max_length=5000)
    sender_type: Literal["user", "chw"] = "user"
    sender_id: str | None = None


class MessageResponse(UserOwnedResponse):
    sender_id: str
    sender_type: str
    content: str
    timestamp: datetime


# --- Appointments and calendar ---


class AppointmentCreate(ApiModel):
    title: str = ""
    provider: str = ""
    datetime: dt.datetime | None = None
    notes: str | None = None


class AppointmentUpdate(ApiModel):
    title: str | None = None
    provider: str | None = None
    datetime: dt.datetime | None = None
    notes: str | None = None


class AppointmentResponse(UserOwnedResponse):
    title: str
    provider: str
    datetime: dt.datetime
    notes: str | None = None


class CalendarDayResponse(ApiModel):
    day: date
    is_today: bool
    in_month: bool
    has_appointment: bool
    appointments: list[AppointmentResponse] = Field(default_factory=list)


class CalendarResponse(ApiModel):
    view: Literal["week", "month"]
    anchor: date
    label: str
    start: date
    end: date
    weeks: list[list[CalendarDayResponse]]


# --- Collaborative care ---


class CareGoalCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    category: str | None = None
    target_date: datetime | None = None
    progress: int = Field(default=0, ge=0, le=100)
    status: str = "active"
    family_support: list[Any] = Field(default_factory=list)
    milestones: list[Any] = Field(default_factory=list)


class CareGoalProgressUpdate(ApiModel):
    progress: Any = Field(..., description="Integer percentage, 0..100")


class CareGoalResponse(UserOwnedResponse):
    created_by: str
    creator_type: str
    title: str
    description: str | None = None
    category: str | None = None
    target_date: datetime | None = None
    progress: int
    status: str
    family_support: list[Any] = Field(default_factory=list)
    milestones: list[Any] = Field(default_factory=list)
    updated_at: datetime | None = None


class CareEventCreate(ApiModel):
    event_type: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    severity: SeverityName = "low"
    follow_up_required: bool = False
    related_goal_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class CareEventResponse(UserOwnedResponse):
    event_type: str
    title: str
    description: str | None = None
    severity: str
    family_notified: bool
    follow_up_required: bool
    related_goal_id: str | None = None
    event_metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("event_metadata"),
        serialization_alias="metadata",
    )
    resolved_at: datetime | None = None


# --- Family ---


class FamilyMemberCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    relationship: str = Field(..., min_length=1, max_length=64)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=32)
    is_emergency_contact: bool = False
    permission_level: PermissionLevelName = "view_only"
    notification_preferences: dict[str, Any] = Field(default_factory=dict)


class FamilyMemberResponse(UserOwnedResponse):
    name: str
    relationship: str
    email: str | None = None
    phone: str | None = None
    is_emergency_contact: bool
    permission_level: str
    invite_status: str
    invite_code: str
    notification_preferences: dict[str, Any] = Field(default_factory=dict)
    last_active_at: datetime | None = None


class InviteResponseRequest(ApiModel):
    status: str


class FamilyCommunicationCreate(ApiModel):
    family_member_id: str | None = None
    sender_id: str | None = None
    sender_type: Literal["user", "family"] = "user"
    message_type: Literal["text", "encouragement", "check_in", "milestone_celebration"] = "text"
    content: str = Field(..., min_length=1, max_length=5000)
    attachments: list[Any] = Field(default_factory=list)
    is_private: bool = False


class FamilyCommunicationResponse(UserOwnedResponse):
    family_member_id: str | None = None
    sender_id: str
    sender_type: str
    message_type: str
    content: str
    attachments: list[Any] = Field(default_factory=list)
    is_private: bool
    read_at: datetime | None = None


class SharedInsightCreate(ApiModel):
    family_member_id: str | None = None
    insight_type: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    share_level: str = "summary"
    shared_with: list[Any] = Field(default_factory=list)
    auto_shared: bool = False


class SharedInsightView(ApiModel):
    viewer_id: str | None = None


class SharedInsightResponse(UserOwnedResponse):
    family_member_id: str | None = None
    insight_type: str
    title: str
    content: str
    share_level: str
    shared_with: list[Any] = Field(default_factory=list)
    viewed_by: list[Any] = Field(default_factory=list)
    auto_shared: bool
    viewed_at: datetime | None = None


class FamilyGoalCreate(ApiModel):
    created_by_member_id: str | None = None
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    target_date: datetime | None = None
    progress: int = Field(default=0, ge=0, le=100)
    status: str = "active"
    collaborators: list[Any] = Field(default_factory=list)
    milestones: list[Any] = Field(default_factory=list)
    celebration_message: str | None = None


class FamilyGoalResponse(UserOwnedResponse):
    created_by_member_id: str | None = None
    title: str
    description: str | None = None
    target_date: datetime | None = None
    progress: int
    status: str
    collaborators: list[Any] = Field(default_factory=list)
    milestones: list[Any] = Field(default_factory=list)
    celebration_message: str | None = None


class FamilyNotificationCreate(ApiModel):
    family_member_id: str
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    notification_type: str = Field(..., min_length=1, max_length=32)
    priority: Literal["low", "normal", "high", "urgent"] = "normal"
    delivery_method: Literal["in_app", "email", "sms", "push"] = "in_app"
    action_required: bool = False
    action_url: str | None = None


class FamilyNotificationResponse(UserOwnedResponse):
    family_member_id: str
    title: str
    message: str
    notification_type: str
    priority: str
    delivery_method: str
    sent_at: datetime | None = None
    read_at: datetime | None = None
    action_required: bool
    action_url: str | None = None


# --- Voice ---


class VoiceProcessRequest(ApiModel):
    transcript: str | None = None


class VoiceProcessResponse(ApiModel):
    response: str
    session_id: str
    mood: MoodAnalysisResponse


class VoiceConversationResponse(UserOwnedResponse):
    session_id: str
    user_message: str
    ai_response: str
    mood: str | None = None
    emotional_tone: str | None = None
    conversation_context: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime


class SessionResponse(ApiModel):
    session_id: str


class TextToSpeechRequest(ApiModel):
    text: str | None = None


# --- User preferences and onboarding ---


class PreferencesRequest(ApiModel):
    preferred_name: str | None = Field(default=None, max_length=100)
    primary_goals: Any = None
    support_areas: list[str] | None = None
    communication_style: str | None = None
    has_completed_before: bool | None = None


class PreferencesResponse(UserOwnedResponse):
    preferred_name: str
    primary_goals: list[str] = Field(default_factory=list)
    support_areas: list[str] = Field(default_factory=list)
    communication_style: str
    has_completed_before: bool
    skipped: bool
    completed_at: datetime | None = None


class OnboardingStatusResponse(ApiModel):
    has_completed_onboarding: bool
    skipped: bool
    welcome_message: str
    coaching_style: str
    priority_domains: list[str] = Field(default_factory=list)
    preferred_name: str | None = None


class CoachingPromptsResponse(ApiModel):
    prompts: list[str]
    based_on: dict[str, Any] | None = None


# --- Biometrics ---


class BiometricEntryCreate(ApiModel):
    heart_rate: int | None = Field(default=None, ge=30, le=220)
    heart_rate_variability: int | None = Field(default=None, ge=0, le=300)
    sleep_duration: float | None = Field(default=None, ge=0, le=24)
    sleep_quality: SleepQualityName | None = None
    step_count: int | None = Field(default=None, ge=0, le=100_000)
    active_minutes: int | None = Field(default=None, ge=0, le=1440)
    stress_level: int | None = Field(default=None, ge=1, le=10)
    blood_oxygen: float | None = Field(default=None, ge=70, le=100)
    body_temperature: float | None = Field(default=None, ge=90, le=110, description="Fahrenheit")
    source: SourceName = "manual"
    timestamp: datetime | None = None


class BiometricDataResponse(UserOwnedResponse):
    heart_rate: int | None = None
    heart_rate_variability: int | None = None
    sleep_duration: float | None = None
    sleep_quality: str | None = None
    step_count: int | None = None
    active_minutes: int | None = None
    stress_level: int | None = None
    blood_oxygen: float | None = None
    body_temperature: float | None = None
    source: str
    timestamp: datetime


class HealthInsightResponse(ApiModel):
    id: str | None = None
    type: str
    title: str
    description: str
    severity: str
    recommendations: list[str] = Field(default_factory=list)
    trend_direction: str
    correlated_moods: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime | None = None


class MoodCorrelationResponse(ApiModel):
    mood: str
    biometric_factors: dict[str, Any] = Field(default_factory=dict)
    correlation_strength: float
    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class StoredCorrelationResponse(UserOwnedResponse):
    mood_id: str
    biometric_data_id: str
    correlation_strength: float
    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    biometric_factors: dict[str, Any] = Field(default_factory=dict)


class BiometricRecordResponse(ApiModel):
    success: bool = True
    entry: BiometricDataResponse
    insights: list[HealthInsightResponse]
    correlations: list[MoodCorrelationResponse]


# --- Community pulse ---


class PulseQuestionResponse(EntityResponse):
    question_text: str
    question_type: str
    options: list[Any] = Field(default_factory=list)
    topic: str | None = None
    tags: list[Any] = Field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None
    show_in_popup: bool
    show_in_homebase: bool
    allow_comparison: bool
    featured: bool
    answer_count: int = 0
    user_has_answered: bool = False
    answer_distribution: dict[str, int] | None = None


class PulseAnswerCreate(ApiModel):
    question_id: str
    selected_option: str | None = Field(default=None, max_length=255)
    explanation_text: str | None = Field(default=None, max_length=2000)


class PulseAnswerResponse(UserOwnedResponse):
    question_id: str
    selected_option: str | None = None
    explanation_text: str | None = None
    answered_at: datetime
    user_snapshot: dict[str, Any] = Field(default_factory=dict)


# --- Analytics ---


class WellnessMetricResponse(ApiModel):
    label: str
    value: int
    change: int
    trend: Literal["up", "down", "stable"]


class AnalyticsInsightResponse(UserOwnedResponse):
    type: str
    title: str
    description: str
    confidence: float
    data: dict[str, Any] = Field(default_factory=dict)
    recommendations: list[str] = Field(default_factory=list)


# --- Intake and referrals ---


class IntakeResponseCreate(ApiModel):
    domain: str = Field(..., min_length=1, max_length=64)
    field: str = Field(..., min_length=1, max_length=128)
    response: str = Field(..., min_length=1)
    referral_tags: list[str] = Field(default_factory=list)
    severity: Literal["low", "medium", "high"] = "low"


class IntakeRecordResponse(UserOwnedResponse):
    domain: str
    field: str
    response: str
    referral_tags: list[str] = Field(default_factory=list)
    severity: str


class ReferralCreate(ApiModel):
    referral_type: str = Field(..., min_length=1, max_length=64)
    partner_organization: str | None = None
    status: str = "pending"
    description: str | None = None
    urgency: Literal["low", "medium", "high"] = "medium"


class ReferralStatusUpdate(ApiModel):
    status: str


class ReferralResponse(UserOwnedResponse):
    referral_type: str
    partner_organization: str | None = None
    status: str
    date_sent: datetime | None = None
    description: str | None = None
    urgency: str


class IntakeResultResponse(ApiModel):
    response: IntakeRecordResponse
    referrals: list[ReferralResponse] = Field(default_factory=list)


# --- Goal-focused intake ---


class IntakeStageResponse(ApiModel):
    stage: int
    name: str
    tone: str
    questions: list[str]
    prompt: str


class IntakeStartResponse(ApiModel):
    message: str
    stage: int = 1
    total_stages: int
    stage_info: IntakeStageResponse


class IntakeTurnRequest(ApiModel):
    user_input: str = Field(..., min_length=1, max_length=4000)
    current_stage: int = Field(default=1, ge=1)


class IntakeTurnResponse(ApiModel):
    stage: int
    responses: list[str]
    insights: list[str] = Field(default_factory=list)
    next_stage: int
    completed: bool
    stage_info: IntakeStageResponse
