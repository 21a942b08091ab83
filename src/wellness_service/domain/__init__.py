"""Wellness Service domain layer - Core business logic."""
from .biometrics import BiometricService
from .care import CareService
from .daily import DailyPracticeService
from .family import FamilyService
from .goal_intake import GoalIntakeService
from .intake import IntakeService
from .metrics import AnalyticsService
from .mood import MoodAnalysis, MoodService
from .onboarding import OnboardingWizard
from .preferences import PreferencesService
from .pulse import PulseService
from .voice import VoiceService
from .voice_controller import VoiceSessionController

__all__ = [
    "AnalyticsService", "BiometricService", "CareService", "DailyPracticeService",
    "FamilyService", "GoalIntakeService", "IntakeService", "MoodAnalysis", "MoodService",
    "OnboardingWizard", "PreferencesService", "PulseService", "VoiceService",
    "VoiceSessionController",
]
