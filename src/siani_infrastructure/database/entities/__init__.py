"""
Domain entity definitions for the SIANI wellness service.

All entities inherit from the base models and register with SchemaRegistry so
tables can be created and seeded by name.

Entity Modules:
- user_entities: User, UserPreferences
- wellness_entities: MoodEntry, DailyAction, Reflection
- resource_entities: Resource, ResourceRating
- care_entities: CareTeamMember, Message, Appointment, CollaborativeCareGoal, CareEvent
- family_entities: FamilyMember, SharedWellnessInsight, FamilyGoal, FamilyNotification, FamilyCommunication
- voice_entities: VoiceInteraction, VoiceConversation
- biometric_entities: BiometricData, HealthInsight, MoodBiometricCorrelation
- pulse_entities: PulseQuestion, PulseAnswer
- intake_entities: IntakeResponse, Referral
- analytics_entities: AnalyticsInsight
"""

from __future__ import annotations

# Order matters: user_entities first since other entities reference users table.

from .user_entities import (
    CommunicationStyle,
    User,
    UserPreferences,
)

from .wellness_entities import (
    POSITIVE_MOODS,
    DailyAction,
    Mood,
    MoodEntry,
    Reflection,
)

from .resource_entities import (
    Resource,
    ResourceRating,
)

from .care_entities import (
    FAMILY_ALERT_SEVERITIES,
    Appointment,
    CareEvent,
    CareEventSeverity,
    CareTeamMember,
    CollaborativeCareGoal,
    Message,
    SenderType,
)

from .family_entities import (
    FamilyCommunication,
    FamilyGoal,
    FamilyMember,
    FamilyNotification,
    InviteStatus,
    PermissionLevel,
    SharedWellnessInsight,
)

from .voice_entities import (
    MAX_AI_RESPONSE_LENGTH,
    MAX_USER_MESSAGE_LENGTH,
    VoiceConversation,
    VoiceInteraction,
)

from .biometric_entities import (
    BiometricData,
    BiometricSource,
    HealthInsight,
    InsightType,
    MoodBiometricCorrelation,
    SleepQuality,
    TrendDirection,
)

from .pulse_entities import (
    PulseAnswer,
    PulseQuestion,
    QuestionType,
)

from .intake_entities import (
    IntakeResponse,
    Referral,
    ReferralStatus,
)

from .analytics_entities import AnalyticsInsight

__all__ = [
    # User entities
    "CommunicationStyle",
    "User",
    "UserPreferences",
    # Wellness entities
    "POSITIVE_MOODS",
    "DailyAction",
    "Mood",
    "MoodEntry",
    "Reflection",
    # Resource entities
    "Resource",
    "ResourceRating",
    # Care entities
    "FAMILY_ALERT_SEVERITIES",
    "Appointment",
    "CareEvent",
    "CareEventSeverity",
    "CareTeamMember",
    "CollaborativeCareGoal",
    "Message",
    "SenderType",
    # Family entities
    "FamilyCommunication",
    "FamilyGoal",
    "FamilyMember",
    "FamilyNotification",
    "InviteStatus",
    "PermissionLevel",
    "SharedWellnessInsight",
    # Voice entities
    "MAX_AI_RESPONSE_LENGTH",
    "MAX_USER_MESSAGE_LENGTH",
    "VoiceConversation",
    "VoiceInteraction",
    # Biometric entities
    "BiometricData",
    "BiometricSource",
    "HealthInsight",
    "InsightType",
    "MoodBiometricCorrelation",
    "SleepQuality",
    "TrendDirection",
    # Pulse entities
    "PulseAnswer",
    "PulseQuestion",
    "QuestionType",
    # Intake entities
    "IntakeResponse",
    "Referral",
    "ReferralStatus",
    # Analytics entities
    "AnalyticsInsight",
]
