"""
SIANI Wellness Service - Goal-focused intake conversation.

An eight stage self-discovery workshop: practical needs first, then purpose,
goals and the blocks in the way. The client keeps the current stage and sends
it with each answer; a long enough answer moves the conversation on.
"""
from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from siani_common.exceptions import EntityNotFoundError, LLMServiceError, ValidationError
from ..infrastructure.clients import OpenAIChatClient, string_list

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IntakeStage:
    stage: int
    name: str
    tone: str
    questions: tuple[str, ...]
    prompt: str


INTAKE_STAGES: tuple[IntakeStage, ...] = (
    IntakeStage(1, "Personal Information", "Grounded", (
        "What should I call you?",
        "What's your birthday and best way to reach you?",
        "Who should we contact in an emergency?",
        "Do you have ID, social, and key documents yet?",
    ), "Collect basic contact information and essential documents status. Keep it practical and grounded."),
    IntakeStage(2, "Justice System History", "Respectful + Factual", (
        "Have you ever been involved with the justice system?",
        "Are you navigating probation, parole, or legal conditions now?",
        "Is there anything legal we should keep in mind as we support you?",
    ), "Gather justice system context with respect and without judgment. Focus on practical support needs."),
    IntakeStage(3, "Immediate Needs", "Focused", (
        "If we had to solve just the next 72 hours, what's most urgent?",
        "Do you have a safe place to sleep?",
        "Any food, meds, hygiene, or phone needs?",
        "What would make these next few days smoother?",
    ), "Identify immediate survival and stability needs. Be practical and solution-focused."),
    IntakeStage(4, "Self-Discovery Exercise", "Expansive + Empowering", (
        "If time and money weren't an issue, what would you want to experience in life?",
        "How do you want to grow?",
        "What do you want to contribute to this world?",
        "Who are you? Why are you here?",
        "Where are you going? And how do you want to be remembered?",
        "If you achieved all your goals, how would that feel? Can we feel some of that now?",
        "What's most important in your life? What are you passionate about?",
    ), "Guide deep self-discovery and purpose exploration. Help them connect with their inner wisdom and potential."),
    IntakeStage(5, "Mission + Life Statement", "Purpose-Driven", (
        "What would your ideal life look like?",
        "How do you want to contribute to the world?",
        "What's your mission, your reason for being?",
        "What's your personal life statement?",
    ), "Help crystallize their life mission and personal statement. Focus on their unique contribution and purpose."),
    IntakeStage(6, "Visioning + Goal Expansion", "Limitless", (
        "Now let's zoom way out. If nothing could stop you, what would you do, be, or build in the next 20 years?",
        "Let's get at least 50 goals out of your head and into motion. Speak them out loud by life area: "
        "Health, Relationships, Career/Business, Fun & Recreation, Money, Personal Growth, Spiritual Life",
    ), "Facilitate expansive goal generation across all life areas. Encourage big thinking and comprehensive life visioning."),
    IntakeStage(7, "Prioritization + Action", "Focused + Confident", (
        "What are your top 5 most important goals for the year?",
        "What's your #1 goal in each life area, and why does it matter?",
        "What's one small step we could take today toward each one?",
        "What help, accountability, or resources might unlock momentum?",
    ), "Guide prioritization and immediate action planning. Help them identify the most important goals and next steps."),
    IntakeStage(8, "Strategy + Unblocking", "Coaching-Style, Reflective", (
        "What's a fear or mental block that still shows up for you?",
        "What's a story you've been telling yourself that keeps you stuck?",
        "What would a more powerful story sound like?",
        "What's distracting or draining you right now?",
        "What's one habit you know it's time to shift?",
        "What skill would make a difference if you mastered it?",
        "Who around you lifts you up? Who pulls you off track?",
        "Who can help keep you accountable this season?",
        "What task are you still trying to do alone that you could delegate?",
        "What's a reward that would feel amazing when you hit your goals?",
    ), "Identify obstacles and create breakthrough strategies. Focus on mindset shifts and support systems."),
)

TOTAL_STAGES = len(INTAKE_STAGES)
GOAL_EXPANSION_STAGE = 6
ADVANCE_WORDS = 10
GOAL_EXPANSION_ADVANCE_WORDS = 30

OPENING_MESSAGE = (
    "Hey. I'm SIAni. You're not just here to survive, we're here to build a life that actually works for you. "
    "This isn't an intake. It's a reset. A moment to get clear, to reclaim your direction, and decide what "
    "really matters next. I'm going to ask a few things to help us figure out what's next and what support "
    "might make the biggest difference right now. You don't need to have it all figured out, this is just "
    "the starting point. Let's start with what's real right now, and then we'll open the lens wider. "
    "What should I call you?"
)
EMPTY_REPLY = "Tell me more about that."
FALLBACK_REPLY = "Let's take a moment to center ourselves. Tell me what's on your mind right now."

STAGE_PROMPT = """You are SIANI conducting a goal-focused intake and needs assessment. This is a 25-30 minute self-discovery workshop, NOT just an intake.

CURRENT STAGE: {name} ({tone})
STAGE PURPOSE: {prompt}

CONVERSATION APPROACH:
- {tone} tone throughout
- Ask one meaningful question at a time
- Listen deeply and reflect back what you hear
- Guide them toward self-discovery, not just information gathering
- Keep responses conversational but purposeful (15-25 words)
- Build on their responses with follow-up questions

AVOID:
- Sounding clinical or robotic
- Rushing through questions
- Multiple questions at once
- Forgetting the empowering, asset-based approach

This is about helping them discover who they are, what they need, and what's possible."""

INSIGHT_PROMPT = """Extract key insights from this {name} intake response. Focus on:
- Strengths and assets
- Support needs
- Goal themes
- Growth opportunities
Return a JSON object {{"insights": [...]}} with 2-3 concise insights."""

REPLY_PARAMS = {"max_tokens": 60, "temperature": 0.8, "frequency_penalty": 0.3, "presence_penalty": 0.2}
INSIGHT_PARAMS = {"max_tokens": 150}


@dataclass
class IntakeTurn:
    stage: int
    responses: list[str]
    insights: list[str] = field(default_factory=list)
    next_stage: int = 1
    completed: bool = False


def should_advance(user_input: str, stage: int) -> bool:
    """Stage six collects goals and needs a longer answer than the rest."""
    words = len(user_input.split())
    if stage == GOAL_EXPANSION_STAGE:
        return words > GOAL_EXPANSION_ADVANCE_WORDS
    return words > ADVANCE_WORDS


class GoalIntakeService:
    def __init__(self, llm: OpenAIChatClient) -> None:
        self._llm = llm
        self._stats = {"turns": 0, "fallbacks": 0, "completed": 0}
        logger.info("goal_intake_service_initialized", llm_enabled=llm.enabled)

    def stage_info(self, stage: int) -> IntakeStage:
        if not 1 <= stage <= TOTAL_STAGES:
            raise EntityNotFoundError("IntakeStage", str(stage), user_message="Stage not found")
        return INTAKE_STAGES[stage - 1]

    def start(self) -> tuple[str, IntakeStage]:
        return OPENING_MESSAGE, INTAKE_STAGES[0]

    async def process(self, user_input: str, current_stage: int = 1) -> IntakeTurn:
        if not 1 <= current_stage <= TOTAL_STAGES:
            raise ValidationError(
                f"Invalid stage: {current_stage}", field="currentStage", value=current_stage,
                constraint=f"1..{TOTAL_STAGES}", user_message="Invalid intake stage",
            )
        stage = INTAKE_STAGES[current_stage - 1]
        self._stats["turns"] += 1
        try:
            reply = await self._llm.complete(
                [{"role": "user", "content": user_input}],
                system_prompt=STAGE_PROMPT.format(name=stage.name, tone=stage.tone, prompt=stage.prompt),
                **REPLY_PARAMS,
            )
        except LLMServiceError as e:
            self._stats["fallbacks"] += 1
            logger.warning("intake_reply_fallback", stage=current_stage, error=e.message)
            return IntakeTurn(stage=current_stage, responses=[FALLBACK_REPLY], next_stage=current_stage)

        advance = should_advance(user_input, current_stage)
        turn = IntakeTurn(
            stage=current_stage,
            responses=[reply or EMPTY_REPLY],
            insights=await self._insights(user_input, stage),
            next_stage=min(current_stage + 1, TOTAL_STAGES) if advance else current_stage,
            completed=current_stage == TOTAL_STAGES and advance,
        )
        if turn.completed:
            self._stats["completed"] += 1
        logger.info("intake_turn_processed", stage=current_stage, next_stage=turn.next_stage,
                    insights=len(turn.insights))
        return turn

    async def _insights(self, user_input: str, stage: IntakeStage) -> list[str]:
        try:
            data = await self._llm.complete_json(
                [{"role": "user", "content": user_input}],
                system_prompt=INSIGHT_PROMPT.format(name=stage.name),
                **INSIGHT_PARAMS,
            )
        except LLMServiceError as e:
            logger.warning("intake_insights_failed", stage=stage.stage, error=e.message)
            return []
        return string_list(data.get("insights"))

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
