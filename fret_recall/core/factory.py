"""Factory for creating Fret Recall components from saved configuration."""

from typing import List, Optional

from ..audio.pitch_detector import PitchDetector
from ..fretboard import build_standard_layouts
from ..logger import get_logger
from ..note_matcher import FrequencyMatcher
from ..note_types import StringLayout
from ..services.frequency import NoteFrequencyTable
from ..services.pitch_detection_service import PitchDetectionService
from .config import ConfigManager

logger = get_logger(__name__)


class ComponentFactory:
    """Builds the core components, passing shared immutable objects explicitly.

    One NoteFrequencyTable is created per factory and handed to every
    matcher it builds.
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        frequency_table: Optional[NoteFrequencyTable] = None,
    ):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
            frequency_table: Shared frequency table, or None to create one
        """
        self.config_manager = config_manager or ConfigManager()
        self.frequency_table = frequency_table or NoteFrequencyTable()

    def create_pitch_detector(self, **kwargs) -> PitchDetector:
        """Create a pitch detector.

        Args:
            **kwargs: Overrides for the saved ``pitch_detector`` configuration

        Returns:
            Pitch detector instance
        """
        config = self.config_manager.get_config("pitch_detector")
        config.update(kwargs)
        detector = PitchDetector(**config)
        logger.info(f"Created pitch detector: {config}")
        return detector

    def create_matcher(self, **kwargs) -> FrequencyMatcher:
        config = self.config_manager.get_config("matcher")
        config.update(kwargs)
        return FrequencyMatcher(self.frequency_table, **config)

    def create_layouts(self, **kwargs) -> List[StringLayout]:
        """Build the string layouts for the configured instrument."""
        config = self.config_manager.get_config("instrument")
        config.update(kwargs)
        return build_standard_layouts(config["string_count"], config["fret_count"])

    def create_live_service(self, **kwargs) -> PitchDetectionService:
        """Create a pitch detection service reading from a live input device.

        Args:
            **kwargs: Overrides for the saved ``audio_input`` configuration

        Returns:
            Pitch detection service instance (not yet started)
        """
        # sounddevice loads PortAudio on import, so only pull it in for live capture
        from ..audio.audio_input import LiveAudioProvider

        config = self.config_manager.get_config("audio_input")
        config.update(kwargs)
        provider = LiveAudioProvider(
            device_id=config["device_id"],
            sample_rate=config["sample_rate"],
            chunk_size=config["buffer_size"],
        )
        return PitchDetectionService(provider, self.create_pitch_detector())
