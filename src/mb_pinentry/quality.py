"""Passphrase quality strategies for the pinentry quality bar."""

# Below this length the score is negative and the bar turns red
MIN_LENGTH = 5


def length_quality(pin: str) -> int:
    """Score by length: 5 points per character, negative while shorter than MIN_LENGTH."""
    quality = 5 * len(pin)
    return quality if len(pin) >= MIN_LENGTH else -quality


def no_quality(_pin: str) -> int | None:
    """Express no opinion, so pinentry cancels every quality inquiry."""
    return None
