# =============================================================================
# lib/summary.py - Reminder Message Summaries
# =============================================================================
# Produces a short 2-4 word title from a reminder message for list views
# and call history ("Medication", "Trash bins", "Doctor appointment").
# =============================================================================

import re

STOP_WORDS = {
    "this", "is", "a", "an", "the", "your", "to", "for", "and", "of", "it",
    "its", "time", "please", "dont", "do", "not", "remember", "hello", "hi",
    "hey", "just", "that", "you", "have", "take", "care", "today", "now",
    "reminder", "call", "calling", "remind", "about", "with", "be", "are",
    "was", "were", "been", "being", "there", "out",
}

# Topic words, taken before any other meaningful word
PRIORITY_KEYWORDS = [
    "medication", "medicine", "pills", "tablet", "dose", "prescription",
    "appointment", "doctor", "dentist", "meeting", "interview",
    "trash", "garbage", "recycling", "bins",
    "exercise", "workout", "gym", "walk", "run",
    "water", "hydrate", "drink",
    "breakfast", "lunch", "dinner", "meal", "eat", "food",
    "call", "phone", "birthday", "anniversary",
    "bill", "payment", "rent", "mortgage",
    "laundry", "dishes", "clean", "chores",
]

_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")


def generate_message_summary(message: str | None, max_words: int = 3) -> str:
    """
    Summarize a reminder message in at most `max_words` words.

    Priority keywords come first (in message order), then other words that
    are not stop words. The first letter is capitalized.

    Example:
        generate_message_summary("Time to take your medication with water")
        # "Medication water"
    """
    if not message or not message.strip():
        return ""

    cleaned = _NON_WORD.sub(" ", message.lower())
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()

    words = [w for w in cleaned.split(" ") if len(w) > 1]

    found_priority = [w for w in words if w in PRIORITY_KEYWORDS]
    meaningful = [w for w in words if w not in STOP_WORDS]

    summary_words: list[str] = []
    for word in found_priority + meaningful:
        if len(summary_words) < max_words and word not in summary_words:
            summary_words.append(word)

    if not summary_words:
        return " ".join(words[:max_words])

    summary = " ".join(summary_words)
    return summary[0].upper() + summary[1:]
