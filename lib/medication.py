# =============================================================================
# lib/medication.py - Medication Reminder Scripts
# =============================================================================
# Builds the spoken script for medication reminders from a list of
# medications (name, quantity, unit, instruction). Also carries the option
# lists the reminder form offers: instructions, dosage units, time presets
# and repeat options.
#
# Usage:
#   from lib.medication import MedicationEntry, generate_multi_medication_message
#   meds = [MedicationEntry(name="Metformin", quantity=1, unit="tablet", instruction="with_food")]
#   generate_multi_medication_message("Mom", meds)
#   # "This is your medication reminder. It's time to take your Metformin - 1 tablet.
#   #  Take with food. Take care!"
# =============================================================================

from dataclasses import dataclass
from typing import NamedTuple


# =============================================================================
# Option Tables
# =============================================================================

class InstructionOption(NamedTuple):
    key: str
    label: str
    message_text: str


INSTRUCTION_OPTIONS: list[InstructionOption] = [
    InstructionOption("none", "None", ""),
    InstructionOption("with_food", "With food", "Take with food."),
    InstructionOption("with_water", "With water", "Take with a full glass of water."),
    InstructionOption("before_meal", "Before meal", "Take before your meal."),
    InstructionOption("after_meal", "After meal", "Take after your meal."),
    InstructionOption("empty_stomach", "On empty stomach", "Take on an empty stomach."),
    InstructionOption("before_bed", "Before bed", "Take before going to bed."),
]

INSTRUCTIONS_BY_KEY = {option.key: option for option in INSTRUCTION_OPTIONS}


class DosageUnit(NamedTuple):
    key: str
    singular: str
    plural: str


DOSAGE_UNITS: list[DosageUnit] = [
    DosageUnit("tablet", "tablet", "tablets"),
    DosageUnit("capsule", "capsule", "capsules"),
    DosageUnit("ml", "ml", "ml"),
    DosageUnit("drops", "drop", "drops"),
    DosageUnit("puff", "puff", "puffs"),
    DosageUnit("unit", "unit", "units"),
]

UNITS_BY_KEY = {unit.key: unit for unit in DOSAGE_UNITS}


class TimePreset(NamedTuple):
    key: str
    label: str
    time: str  # HH:MM, empty for custom


TIME_PRESETS: list[TimePreset] = [
    TimePreset("morning", "Morning", "09:00"),
    TimePreset("afternoon", "Afternoon", "14:00"),
    TimePreset("evening", "Evening", "18:00"),
    TimePreset("bedtime", "Bedtime", "21:00"),
    TimePreset("custom", "Custom...", ""),
]

REPEAT_OPTIONS: list[tuple[str, str]] = [
    ("daily", "Daily"),
    ("weekly", "Weekly"),
    ("once", "Just once"),
]


@dataclass
class MedicationEntry:
    """
    One medication in a medication reminder.

    `dosage` is the free-text dosage older reminders stored; it is used only
    when quantity/unit are missing.
    """
    name: str
    quantity: float | None = None
    unit: str | None = None
    instruction: str = "none"
    dosage: str | None = None


# =============================================================================
# Formatting
# =============================================================================

def _format_quantity(quantity: float) -> str:
    if float(quantity).is_integer():
        return str(int(quantity))
    return str(quantity)


def format_medication_dosage(quantity: float | None, unit: str | None) -> str:
    """
    Format a dosage with proper pluralization.

    Example:
        format_medication_dosage(2, "tablet")  # "2 tablets"
        format_medication_dosage(1, "drops")   # "1 drop"
    """
    if not quantity or not unit:
        return ""

    unit_config = UNITS_BY_KEY.get(unit)
    if unit_config is None:
        return f"{_format_quantity(quantity)} {unit}"

    label = unit_config.singular if quantity == 1 else unit_config.plural
    return f"{_format_quantity(quantity)} {label}"


def _dosage_text(medication: MedicationEntry) -> str:
    if medication.quantity and medication.unit:
        return format_medication_dosage(medication.quantity, medication.unit)
    if medication.dosage and medication.dosage.strip():
        return medication.dosage.strip()
    return ""


def _instruction_text(instruction: str) -> str:
    option = INSTRUCTIONS_BY_KEY.get(instruction)
    return option.message_text if option else ""


def get_medication_display_parts(medication: MedicationEntry) -> list[str]:
    """Name, dosage and lowercased instruction label, for chip-style display."""
    parts = [medication.name]

    dosage = _dosage_text(medication)
    if dosage:
        parts.append(dosage)

    if medication.instruction != "none":
        option = INSTRUCTIONS_BY_KEY.get(medication.instruction)
        if option:
            parts.append(option.label.lower())

    return parts


def get_grouped_instruction(medications: list[MedicationEntry]) -> str:
    """
    Instruction text shared by at least half of the medications.

    Returns an empty string when no instruction is that common.
    """
    counts: dict[str, int] = {}
    for medication in medications:
        if medication.instruction != "none":
            counts[medication.instruction] = counts.get(medication.instruction, 0) + 1

    if not counts:
        return ""

    # sorted() is stable, so ties keep first-seen order
    most_common, count = sorted(counts.items(), key=lambda item: item[1], reverse=True)[0]

    if count >= len(medications) * 0.5:
        return _instruction_text(most_common)
    return ""


# =============================================================================
# Message Generation
# =============================================================================

def generate_multi_medication_message(
    recipient_name: str,
    medications: list[MedicationEntry],
) -> str:
    """
    Build the spoken script for one or more medications.

    Detail shrinks as the list grows: one medication gets its dosage and
    instruction, two to four are listed with dosages, five or more are
    summarized by count.
    """
    if not medications:
        return ""

    count = len(medications)

    def with_parens(med: MedicationEntry) -> str:
        dosage = _dosage_text(med)
        return f"{med.name} ({dosage})" if dosage else med.name

    message = "This is your medication reminder. "

    if count == 1:
        med = medications[0]
        dosage = _dosage_text(med)
        single = f"{med.name} - {dosage}" if dosage else med.name
        message += f"It's time to take your {single}."

        if med.instruction != "none":
            instruction = _instruction_text(med.instruction)
            if instruction:
                message += f" {instruction}"

    elif count == 2:
        message += (
            f"It's time to take your {with_parens(medications[0])} "
            f"and {with_parens(medications[1])}."
        )
        grouped = get_grouped_instruction(medications)
        if grouped:
            message += f" {grouped}"

    elif count <= 4:
        names = [with_parens(med) for med in medications]
        last = names.pop()
        message += f"Time to take your medications: {', '.join(names)}, and {last}."
        grouped = get_grouped_instruction(medications)
        if grouped:
            message += f" {grouped}"

    else:
        message += f"It's time to take your {count} medications."
        grouped = get_grouped_instruction(medications)
        if grouped:
            lowered = grouped.lower()
            if lowered.startswith("take "):
                lowered = lowered[len("take "):]
            message += f" Remember to {lowered}"

    message += " Take care!"
    return message


def generate_medication_message(
    recipient_name: str,
    medication_name: str,
    dosage: str | None,
    instruction: str,
) -> str:
    """Single-medication script from free-text form inputs."""
    medication = medication_name.strip() or "medication"

    message = f"This is your medication reminder. It's time to take your {medication}"

    if dosage and dosage.strip():
        message += f" - {dosage.strip()}"

    message += "."

    if instruction != "none":
        text = _instruction_text(instruction)
        if text:
            message += f" {text}"

    message += " Take care!"
    return message


def get_db_frequency(repeat: str) -> str:
    """Map a repeat option key to the reminders.frequency value."""
    return repeat if repeat in ("daily", "weekly", "once") else "once"
