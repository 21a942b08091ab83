"""
SIANI Wellness Service - Keyword coaching for voice transcripts.

Each transcript is read for the life domain it touches and the emotional
tone it carries. Together they score the exchange in SCCS points
(self-sufficiency and community connection), pick a coaching prompt and,
for a few combinations, suggest a partner referral.
"""
from __future__ import annotations

import random
from dataclasses import dataclass

# Checked in order; the first domain or tone with a matching keyword wins.
DOMAIN_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("housing", ("housing", "home", "sleep", "apartment", "rent", "shelter")),
    ("employment", ("work", "job", "employment", "income", "career", "skills")),
    ("mental_health", ("feel", "stress", "anxiety", "depression", "mental", "therapy")),
    ("relationships", ("family", "friend", "relationship", "people", "connect", "support")),
)

TONE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("hopeful", ("proud", "excited", "good", "better", "grateful")),
    ("overwhelmed", ("overwhelmed", "too much", "can't handle", "stressed")),
    ("discouraged", ("tired", "give up", "hopeless", "nothing")),
    ("determined", ("ready", "will", "going to", "determined")),
)

NEUTRAL_TONE = "neutral"

BASE_POINTS = 5
TONE_POINTS = {"hopeful": 15, "determined": 20, "overwhelmed": 10}
GOAL_POINTS = 20
BREAKTHROUGH_POINTS = 30
BREAKTHROUGH_PHRASES = ("first time", "never thought")

DOMAIN_PROMPTS: dict[str, tuple[str, ...]] = {
    "housing": (
        "What's the energy like where you sleep at night?",
        "If housing wasn't a worry, what would you focus on instead?",
        "What would 'home' feel like for you, not just where, but how?",
        "What kind of space would feel safe and stable for you right now?",
        "Tell me about where you're sleeping these days. Is that working?",
        "If we could remove one housing stress this week, what would it be?",
    ),
    "mental_health": (
        "When do you feel most like yourself?",
        "What helps you get through the hard days, even just a little?",
        "If we could set up one support for your mental peace, what would that be?",
        "What helps you stay grounded when things get heavy?",
        "Is there anyone who helps you feel calm or supported?",
        "If you had a safe place to talk, what would you want to share?",
    ),
    "employment": (
        "What kind of work would make you proud to say, 'I do this'?",
        "What skills do you have that people might overlook?",
        "What's one step we could take together toward income today?",
        "Have you had a job you enjoyed before?",
        "Would working again feel like a relief or a pressure right now?",
    ),
    "relationships": (
        "Who are the people you most want to show up for?",
        "Any relationships that are complicated but still matter to you?",
        "If you could reconnect with someone, who comes to mind?",
    ),
}

GENERAL_RESPONSES = {
    "overwhelmed": "Let's just pause right there... take one breath with me. You don't have to figure everything out today. Just this one step.",
    "discouraged": "A lot of people feel like this at the beginning. It doesn't mean anything's wrong with you. What's one thing you're proud of or grateful for today?",
    "hopeful": "I can hear that energy in your voice. That's powerful. What would you like to focus on first?",
    "determined": "That's the voice of someone who's ready to build something different. What feels most important to tackle?",
}
DEFAULT_RESPONSE = "I'm here with you. What feels most real for you right now?"

REFERRALS = {
    ("housing", "overwhelmed"): "supportive_housing_partner",
    ("mental_health", "discouraged"): "mental_health_clinic",
    ("mental_health", "overwhelmed"): "mental_health_clinic",
    ("employment", "determined"): "job_training_program",
}


@dataclass(frozen=True)
class CoachingResult:
    response: str
    domain: str | None
    emotional_tone: str
    sccs_points: int
    suggested_referral: str | None = None

    def to_context(self) -> dict[str, object]:
        """Fields stored with a voice exchange."""
        return {
            "domain": self.domain,
            "coachingTone": self.emotional_tone,
            "sccsPoints": self.sccs_points,
            "suggestedReferral": self.suggested_referral,
        }


def _first_match(text: str, table: tuple[tuple[str, tuple[str, ...]], ...]) -> str | None:
    lowered = text.lower()
    for name, keywords in table:
        if any(keyword in lowered for keyword in keywords):
            return name
    return None


def detect_domain(transcript: str) -> str | None:
    return _first_match(transcript, DOMAIN_KEYWORDS)


def emotional_tone(transcript: str) -> str:
    return _first_match(transcript, TONE_KEYWORDS) or NEUTRAL_TONE


def sccs_points(transcript: str, tone: str, domain: str | None) -> int:
    lowered = transcript.lower()
    points = BASE_POINTS + TONE_POINTS.get(tone, 0)
    if domain and "goal" in lowered:
        points += GOAL_POINTS
    if any(phrase in lowered for phrase in BREAKTHROUGH_PHRASES):
        points += BREAKTHROUGH_POINTS
    return points


def suggested_referral(domain: str | None, tone: str) -> str | None:
    return REFERRALS.get((domain, tone)) if domain else None


def domain_prompt(domain: str, tone: str, rng: random.Random | None = None) -> str:
    """Grounding prompt when overwhelmed, a forward one when hopeful, otherwise any."""
    prompts = DOMAIN_PROMPTS[domain]
    if tone == "overwhelmed":
        return prompts[0]
    if tone in ("hopeful", "determined"):
        return prompts[1]
    return (rng or random).choice(prompts)


def coach(transcript: str, rng: random.Random | None = None) -> CoachingResult:
    domain = detect_domain(transcript)
    tone = emotional_tone(transcript)
    if domain:
        response = domain_prompt(domain, tone, rng)
    else:
        response = GENERAL_RESPONSES.get(tone, DEFAULT_RESPONSE)
    return CoachingResult(
        response=response,
        domain=domain,
        emotional_tone=tone,
        sccs_points=sccs_points(transcript, tone, domain),
        suggested_referral=suggested_referral(domain, tone),
    )
