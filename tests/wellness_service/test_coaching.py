"""
Tests for keyword coaching of voice transcripts.
"""
import random

from wellness_service.domain.coaching import (
    DEFAULT_RESPONSE,
    DOMAIN_PROMPTS,
    GENERAL_RESPONSES,
    coach,
    detect_domain,
    emotional_tone,
    sccs_points,
    suggested_referral,
)


class TestDetection:
    def test_first_matching_domain_wins(self) -> None:
        assert detect_domain("I lost my apartment") == "housing"
        assert detect_domain("Need a JOB near home") == "housing"
        assert detect_domain("Career fair tomorrow") == "employment"
        assert detect_domain("Therapy helped") == "mental_health"
        assert detect_domain("Called my sister and a friend") == "relationships"
        assert detect_domain("Nice weather") is None

    def test_tone(self) -> None:
        assert emotional_tone("I'm proud of today") == "hopeful"
        assert emotional_tone("It's all too much") == "overwhelmed"
        assert emotional_tone("So tired of this") == "discouraged"
        assert emotional_tone("I'm going to apply") == "determined"
        assert emotional_tone("Just checking in") == "neutral"


class TestScoring:
    def test_points(self) -> None:
        assert sccs_points("hello", "neutral", None) == 5
        assert sccs_points("my goal", "determined", "employment") == 45
        assert sccs_points("my goal", "hopeful", None) == 20
        assert sccs_points("First time I said it out loud", "overwhelmed", None) == 45

    def test_referrals(self) -> None:
        assert suggested_referral("housing", "overwhelmed") == "supportive_housing_partner"
        assert suggested_referral("mental_health", "discouraged") == "mental_health_clinic"
        assert suggested_referral("mental_health", "overwhelmed") == "mental_health_clinic"
        assert suggested_referral("employment", "determined") == "job_training_program"
        assert suggested_referral("employment", "hopeful") is None
        assert suggested_referral(None, "overwhelmed") is None


class TestCoach:
    def test_domain_prompt_follows_tone(self) -> None:
        overwhelmed = coach("Rent is overwhelmed me")
        assert overwhelmed.domain == "housing"
        assert overwhelmed.response == DOMAIN_PROMPTS["housing"][0]
        assert overwhelmed.suggested_referral == "supportive_housing_partner"

        hopeful = coach("Work is going better")
        assert hopeful.response == DOMAIN_PROMPTS["employment"][1]

    def test_neutral_domain_prompt_is_random(self) -> None:
        result = coach("Thinking about my family", rng=random.Random(3))
        assert result.response in DOMAIN_PROMPTS["relationships"]

    def test_general_response_without_domain(self) -> None:
        assert coach("So tired").response == GENERAL_RESPONSES["discouraged"]
        assert coach("Hello there").response == DEFAULT_RESPONSE

    def test_context_fields(self) -> None:
        context = coach("I'm ready to find a job, my goal is income").to_context()
        assert context == {
            "domain": "employment",
            "coachingTone": "determined",
            "sccsPoints": 45,
            "suggestedReferral": "job_training_program",
        }
