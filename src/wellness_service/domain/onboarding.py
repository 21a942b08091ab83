"""
SIANI Wellness Service - Onboarding wizard and personalisation.

The wizard walks a new user through five fixed steps and collects the
preferences that shape coaching: preferred name, goals and communication
style. Helpers here turn those preferences into greetings, priority
domains and coaching prompts.
"""
from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from siani_common.exceptions import BusinessRuleViolationError, ValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OnboardingStep:
    id: str
    title: str
    subtitle: str
    character_message: str
    character_emotion: str


STEPS: tuple[OnboardingStep, ...] = (
    OnboardingStep(
        "welcome", "Welcome to SIANI", "I'm here to walk alongside you",
        "Hey there. I'm SIANI, and I'm genuinely glad you're here. This isn't about fixing you "
        "or changing who you are. You're already whole. I'm just here to remind you of the "
        "strength you already carry when life gets overwhelming.",
        "welcoming",
    ),
    OnboardingStep(
        "understanding", "I Get It", "Your journey matters",
        "I know this might feel like just another system asking you questions. I want you to "
        "know this is different. I'm trauma-informed, which means I understand that your "
        "experiences matter and your responses make sense. You're in control here.",
        "understanding",
    ),
    OnboardingStep(
        "goals", "What Matters to You?", "Let's focus on your priorities",
        "What matters most to you right now? There's no wrong answer here. Whether it's housing, "
        "reconnecting with family, finding work, or just getting through each day, your "
        "priorities are valid and important.",
        "encouraging",
    ),
    OnboardingStep(
        "support", "How Can I Support You?", "Your communication preferences",
        "Everyone needs support differently. Some people want direct guidance, others prefer "
        "gentle encouragement. What style feels right for you?",
        "understanding",
    ),
    OnboardingStep(
        "ready", "You're Ready", "Let's begin this journey together",
        "You've shown up. You've been honest about what matters to you. That's already a huge "
        "step. Remember, you already have everything you need inside you. I'm just here to help "
        "you remember that when things get tough.",
        "celebrating",
    ),
)

GOALS_STEP = "goals"

GOAL_DOMAINS: dict[str, str] = {
    "Stable Housing": "housing",
    "Employment/Work": "employment",
    "Family Relationships": "relationships",
    "Mental Health": "mental_health",
    "Physical Health": "health",
    "Legal/Court Issues": "legal",
    "Education/Skills": "education",
    "Financial Stability": "financial",
    "Sobriety/Recovery": "recovery",
    "Community Connection": "community",
    "Personal Growth": "personal_growth",
    "Daily Stability": "daily_stability",
}

COMMUNICATION_STYLES = ("gentle", "direct", "flexible")
DEFAULT_STYLE = "gentle"
GENERIC_WELCOME = "Welcome to SIANI. I'm here to support you."


@dataclass
class OnboardingPreferencesData:
    preferred_name: str = ""
    primary_goals: list[str] = field(default_factory=list)
    support_areas: list[str] = field(default_factory=list)
    communication_style: str = DEFAULT_STYLE
    has_completed_before: bool = False
    completed_at: datetime | None = None

    def to_values(self) -> dict[str, Any]:
        return {
            "preferred_name": self.preferred_name,
            "primary_goals": list(self.primary_goals),
            "support_areas": list(self.support_areas),
            "communication_style": self.communication_style,
            "has_completed_before": self.has_completed_before,
            "completed_at": self.completed_at,
        }


def default_preferences() -> OnboardingPreferencesData:
    """Preferences recorded when the user skips onboarding."""
    return OnboardingPreferencesData(completed_at=datetime.now(timezone.utc))


def validate_style(style: str) -> str:
    if style not in COMMUNICATION_STYLES:
        raise ValidationError(
            f"Unknown communication style: {style}",
            field="communicationStyle",
            constraint="one of gentle, direct, flexible",
        )
    return style


class OnboardingWizard:
    """Five-step onboarding flow with forward/back navigation."""

    def __init__(self, steps: Sequence[OnboardingStep] = STEPS) -> None:
        self._steps = tuple(steps)
        self._index = 0
        self._completed = False
        self.preferences = OnboardingPreferencesData()

    @property
    def current_step(self) -> OnboardingStep:
        return self._steps[self._index]

    @property
    def step_index(self) -> int:
        return self._index

    @property
    def is_first_step(self) -> bool:
        return self._index == 0

    @property
    def is_last_step(self) -> bool:
        return self._index == len(self._steps) - 1

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def progress(self) -> float:
        return (self._index + 1) / len(self._steps) * 100

    @property
    def can_proceed(self) -> bool:
        if self.current_step.id == GOALS_STEP:
            return len(self.preferences.primary_goals) > 0
        return True

    def next(self) -> OnboardingPreferencesData | None:
        """Advance one step; on the last step complete and return the preferences."""
        if not self.can_proceed:
            raise BusinessRuleViolationError(
                "goal_required",
                "At least one goal must be selected before continuing",
                user_message="Choose at least one goal to continue.",
            )
        if not self.is_last_step:
            self._index += 1
            return None
        self.preferences.completed_at = datetime.now(timezone.utc)
        self._completed = True
        logger.info("onboarding_completed", goals=len(self.preferences.primary_goals),
                    communication_style=self.preferences.communication_style)
        return self.preferences

    def back(self) -> None:
        if self._index > 0:
            self._index -= 1

    def toggle_goal(self, goal: str) -> None:
        goals = self.preferences.primary_goals
        if goal in goals:
            goals.remove(goal)
        else:
            goals.append(goal)

    def set_communication_style(self, style: str) -> None:
        self.preferences.communication_style = validate_style(style)

    def set_preferred_name(self, name: str) -> None:
        self.preferences.preferred_name = name.strip()

    def skip(self) -> OnboardingPreferencesData:
        self.preferences = default_preferences()
        self._completed = True
        return self.preferences


def welcome_message(preferred_name: str | None, communication_style: str | None) -> str:
    if communication_style is None:
        return GENERIC_WELCOME
    name = preferred_name or "friend"
    if communication_style == "direct":
        return f"Welcome back, {name}. Ready to work on your goals?"
    if communication_style == "flexible":
        return f"Hey {name}, good to see you. How are you feeling today?"
    return f"Welcome back, {name}. I'm glad you're here."


def priority_domains(goals: Sequence[str]) -> list[str]:
    return [GOAL_DOMAINS[goal] for goal in goals if goal in GOAL_DOMAINS]


DEFAULT_PROMPTS = (
    "How are you feeling today?",
    "What's one thing you'd like to work on?",
    "Tell me about what's on your mind.",
)

GOAL_PROMPTS: dict[str, tuple[str, ...]] = {
    "Stable Housing": (
        "How's your living situation feeling today?",
        "Any housing updates or concerns this week?",
        "What would make your space feel more like home?",
    ),
    "Employment/Work": (
        "How's the job search going, or how's work treating you?",
        "What kind of work feels like the right fit for you?",
        "Any barriers coming up around work that we can talk through?",
    ),
    "Family Relationships": (
        "How are things with your family lately?",
        "Any family connections you want to strengthen or repair?",
        "What's one small step toward the relationships you want?",
    ),
    "Mental Health": (
        "How's your mental health been this week?",
        "What's helping you cope when things get overwhelming?",
        "Any thoughts or feelings you want to process together?",
    ),
    "Legal/Court Issues": (
        "Any legal stuff coming up that's on your mind?",
        "How are you handling the stress of court or probation?",
        "Need help thinking through any legal documents or appointments?",
    ),
}

STYLE_PROMPTS: dict[str, tuple[str, ...]] = {
    "direct": (
        "What's the main thing you need to tackle today?",
        "What's your next move going to be?",
    ),
    "flexible": (
        "How are you feeling, and what do you need from me today?",
        "What's your energy like right now?",
    ),
    "gentle": (
        "I'm here with you. What's on your heart today?",
        "Take your time. What feels important to share?",
    ),
}

GENERAL_PROMPTS = (
    "What's one thing that went well recently?",
    "What's something you're looking forward to?",
    "How can I best support you right now?",
)

MAX_PROMPTS = 5


def coaching_prompts(
    goals: Sequence[str],
    communication_style: str,
    choose: Callable[[Sequence[str]], str] = random.choice,
) -> list[str]:
    """One prompt per recognised goal, then style prompts, padded to at least three."""
    prompts = [choose(GOAL_PROMPTS[goal]) for goal in goals if goal in GOAL_PROMPTS]
    prompts.extend(STYLE_PROMPTS.get(communication_style, STYLE_PROMPTS[DEFAULT_STYLE]))
    if len(prompts) < 3:
        prompts.extend(GENERAL_PROMPTS)
    return prompts[:MAX_PROMPTS]
