# =============================================================================
# tests/test_medication.py - Medication Script Tests
# =============================================================================
# Tests for lib/medication.py: dosage formatting, grouped instructions and
# the spoken script for one to many medications.
# =============================================================================

import pytest

from lib.medication import (
    MedicationEntry,
    format_medication_dosage,
    generate_medication_message,
    generate_multi_medication_message,
    get_db_frequency,
    get_grouped_instruction,
    get_medication_display_parts,
)


class TestDosageFormatting:
    """Tests for format_medication_dosage()."""

    @pytest.mark.parametrize("quantity,unit,expected", [
        (1, "tablet", "1 tablet"),
        (2, "tablet", "2 tablets"),
        (1, "drops", "1 drop"),
        (3, "drops", "3 drops"),
        (0.5, "ml", "0.5 ml"),
        (2.0, "puff", "2 puffs"),
        (2, "sachet", "2 sachet"),
    ])
    def test_pluralization(self, quantity, unit, expected):
        assert format_medication_dosage(quantity, unit) == expected

    def test_missing_parts(self):
        assert format_medication_dosage(None, "tablet") == ""
        assert format_medication_dosage(2, None) == ""


class TestGroupedInstruction:
    """Tests for get_grouped_instruction()."""

    def test_shared_by_half(self):
        meds = [
            MedicationEntry(name="A", instruction="with_food"),
            MedicationEntry(name="B"),
        ]
        assert get_grouped_instruction(meds) == "Take with food."

    def test_not_common_enough(self):
        meds = [
            MedicationEntry(name="A", instruction="with_food"),
            MedicationEntry(name="B"),
            MedicationEntry(name="C"),
        ]
        assert get_grouped_instruction(meds) == ""

    def test_no_instructions(self):
        assert get_grouped_instruction([MedicationEntry(name="A")]) == ""


class TestMultiMedicationMessage:
    """Tests for generate_multi_medication_message()."""

    def test_empty_list(self):
        assert generate_multi_medication_message("Mom", []) == ""

    def test_single_medication(self):
        meds = [MedicationEntry(name="Metformin", quantity=1, unit="tablet", instruction="with_food")]
        assert generate_multi_medication_message("Mom", meds) == (
            "This is your medication reminder. It's time to take your "
            "Metformin - 1 tablet. Take with food. Take care!"
        )

    def test_single_uses_free_text_dosage(self):
        meds = [MedicationEntry(name="Insulin", dosage=" 10 units ")]
        assert generate_multi_medication_message("Dad", meds) == (
            "This is your medication reminder. It's time to take your "
            "Insulin - 10 units. Take care!"
        )

    def test_two_medications(self):
        meds = [
            MedicationEntry(name="Calpol", quantity=2, unit="tablet", instruction="with_food"),
            MedicationEntry(name="Syrup", quantity=5, unit="ml"),
        ]
        assert generate_multi_medication_message("Grandma", meds) == (
            "This is your medication reminder. It's time to take your "
            "Calpol (2 tablets) and Syrup (5 ml). Take with food. Take care!"
        )

    def test_three_medications_listed(self):
        meds = [
            MedicationEntry(name="A", quantity=1, unit="tablet"),
            MedicationEntry(name="B", quantity=1, unit="capsule"),
            MedicationEntry(name="C"),
        ]
        assert generate_multi_medication_message("Mom", meds) == (
            "This is your medication reminder. Time to take your medications: "
            "A (1 tablet), B (1 capsule), and C. Take care!"
        )

    def test_five_medications_summarized(self):
        meds = [MedicationEntry(name=f"Med{i}", instruction="empty_stomach") for i in range(5)]
        assert generate_multi_medication_message("Mom", meds) == (
            "This is your medication reminder. It's time to take your 5 medications. "
            "Remember to on an empty stomach. Take care!"
        )


class TestSingleMedicationMessage:
    """Tests for generate_medication_message()."""

    def test_with_dosage_and_instruction(self):
        assert generate_medication_message("Mom", "Aspirin", "1 tablet", "before_bed") == (
            "This is your medication reminder. It's time to take your Aspirin - 1 tablet. "
            "Take before going to bed. Take care!"
        )

    def test_blank_name_falls_back(self):
        assert generate_medication_message("Mom", "  ", None, "none") == (
            "This is your medication reminder. It's time to take your medication. Take care!"
        )


class TestHelpers:
    def test_display_parts(self):
        med = MedicationEntry(name="Calpol", quantity=2, unit="tablet", instruction="with_food")
        assert get_medication_display_parts(med) == ["Calpol", "2 tablets", "with food"]

    def test_db_frequency(self):
        assert get_db_frequency("daily") == "daily"
        assert get_db_frequency("monthly") == "once"
