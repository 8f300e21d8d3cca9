import math
import numbers
from typing import ClassVar, Iterable, Optional

from .exceptions import InvalidConfigurationError
from .logger import get_logger
from .note_types import PitchedNote
from .services.frequency import NoteFrequencyTable, cents_between

# Get logger for this module
logger = get_logger(__name__)


class FrequencyMatcher:
    """
    Decides whether a detected frequency is one of a set of target notes.

    Equal-tempered notes are spaced logarithmically, so the tolerance is
    expressed in cents rather than Hz: 50 cents either side of the target
    (a quarter-tone) by default.
    """

    DEFAULT_TOLERANCE_CENTS: ClassVar[float] = 50.0

    def __init__(
        self,
        frequency_table: NoteFrequencyTable,
        tolerance_cents: float = DEFAULT_TOLERANCE_CENTS,
    ) -> None:
        self._table = frequency_table
        self._tolerance_cents = self._validate_tolerance(tolerance_cents)

    @property
    def frequency_table(self) -> NoteFrequencyTable:
        return self._table

    @property
    def tolerance_cents(self) -> float:
        return self._tolerance_cents

    @staticmethod
    def _validate_tolerance(tolerance_cents: float) -> float:
        if (
            not isinstance(tolerance_cents, numbers.Real)
            or isinstance(tolerance_cents, bool)
            or not tolerance_cents >= 0
        ):
            raise InvalidConfigurationError(f"Invalid tolerance: {tolerance_cents!r} cents")
        return float(tolerance_cents)

    @staticmethod
    def _is_valid_frequency(detected_hz: float) -> bool:
        return (
            isinstance(detected_hz, numbers.Real)
            and not isinstance(detected_hz, bool)
            and math.isfinite(detected_hz)
            and detected_hz > 0
        )

    def cents_from(self, detected_hz: float, target: PitchedNote) -> float:
        """Signed distance in cents from ``target`` to ``detected_hz``."""
        return cents_between(detected_hz, self._table.lookup(target))

    def find_match(
        self,
        detected_hz: float,
        targets: Optional[Iterable[PitchedNote]],
        tolerance_cents: Optional[float] = None,
    ) -> Optional[PitchedNote]:
        """
        Find the target note that the detected frequency is playing.

        When several targets fall within tolerance the nearest one in cents
        wins; exact ties keep the target seen first.

        Args:
            detected_hz: The detected frequency in Hz
            targets: Candidate notes; None or empty yields no match
            tolerance_cents: Override for the matcher's default tolerance
        Returns:
            The matched note, or None if no target is within tolerance
        """
        tolerance = (
            self._tolerance_cents
            if tolerance_cents is None
            else self._validate_tolerance(tolerance_cents)
        )
        if not self._is_valid_frequency(detected_hz) or not targets:
            return None

        best: Optional[PitchedNote] = None
        best_distance = math.inf
        for target in targets:
            distance = abs(self.cents_from(detected_hz, target))
            logger.debug(f"{detected_hz:.2f}Hz vs {target}: {distance:.1f} cents")
            if distance <= tolerance and distance < best_distance:
                best, best_distance = target, distance

        if best is not None:
            logger.debug(f"Matched {detected_hz:.2f}Hz to {best} ({best_distance:.1f} cents)")
        return best

    def is_match(
        self,
        detected_hz: float,
        target: Optional[PitchedNote],
        tolerance_cents: Optional[float] = None,
    ) -> bool:
        """
        Check if the detected frequency is the target note within tolerance.

        Args:
            detected_hz: The detected frequency in Hz
            target: The target note
            tolerance_cents: Override for the matcher's default tolerance
        Returns:
            bool: True if within tolerance, False otherwise
        """
        if target is None:
            return False
        return self.find_match(detected_hz, [target], tolerance_cents) is not None
