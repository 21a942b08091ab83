"""
Tests for the schema registry.
"""
import pytest

from siani_infrastructure.database import SchemaRegistry
from siani_infrastructure.database.entities import Appointment, PulseQuestion


class TestSchemaRegistry:
    """Entity discovery by table name."""

    def test_every_table_is_registered(self) -> None:
        expected = {
            "users", "user_preferences", "mood_entries", "daily_actions", "reflections",
            "resources", "resource_ratings", "care_team_members", "messages", "appointments",
            "collaborative_care_goals", "care_events", "family_members", "shared_wellness_insights",
            "family_goals", "family_notifications", "family_communication", "voice_interactions",
            "voice_conversations", "biometric_data", "health_insights", "mood_biometric_correlations",
            "pulse_questions", "pulse_answers", "intake_responses", "referrals", "analytics_insights",
        }
        assert expected <= {table.name for table in SchemaRegistry.tables()}

    def test_get_by_table_name(self) -> None:
        assert SchemaRegistry.get("appointments") is Appointment

    def test_tables_sorted_by_name(self) -> None:
        names = [table.name for table in SchemaRegistry.tables()]
        assert names == sorted(names)
        assert PulseQuestion.__table__ in SchemaRegistry.tables()

    def test_unknown_table_raises(self) -> None:
        with pytest.raises(KeyError, match="not found in schema registry"):
            SchemaRegistry.get("no_such_table")

    def test_reregistering_same_class_is_allowed(self) -> None:
        assert SchemaRegistry.register(Appointment) is Appointment

    def test_conflicting_registration_rejected(self) -> None:
        class Impostor:
            __tablename__ = "appointments"

        with pytest.raises(ValueError, match="already registered"):
            SchemaRegistry.register(Impostor)  # type: ignore[type-var]

    def test_statistics_count_columns(self) -> None:
        stats = SchemaRegistry.get_statistics()
        assert stats["total_entities"] >= 27
        assert stats["tables"]["appointments"] >= 5
