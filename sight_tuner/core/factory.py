"""Factory for creating Sight Tuner components from configuration."""

from typing import Optional

from ..detection.autocorrelation import AutocorrelationEstimator
from ..detection.stability_filter import StabilityFilter
from ..logger import get_logger
from ..note_game_core import NoteGame
from ..services.audio_providers import LiveAudioProvider, WavFileAudioProvider
from ..services.tuner_service import TunerPipeline, TunerService
from .config import ConfigManager
from .interfaces import IAudioProvider

logger = get_logger(__name__)


class ComponentFactory:
    """Factory for creating Sight Tuner components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

    def create_estimator(self, **kwargs) -> AutocorrelationEstimator:
        config = self.config_manager.get_config("pitch_detector")
        config.update(kwargs)
        # Unrelated keys in the user's file are ignored
        return AutocorrelationEstimator(
            silence_rms=config["silence_rms"],
            trim_threshold=config["trim_threshold"],
        )

    def create_stability_filter(self, mode: Optional[str] = None) -> StabilityFilter:
        config = self.config_manager.get_config("smoothing")
        return StabilityFilter(
            mode=mode or config["mode"],
            modes=self.config_manager.smoothing_modes(),
        )

    def create_game(self, **kwargs) -> NoteGame:
        config = self.config_manager.get_config("game")
        kwargs.setdefault("cooldown", config["cooldown"])
        return NoteGame(**kwargs)

    def create_pipeline(
        self,
        smoothing: Optional[str] = None,
        display: Optional[str] = None,
        with_game: bool = True,
        **game_kwargs,
    ) -> TunerPipeline:
        """Create a pipeline wired from the stored configuration.

        Args:
            smoothing: Smoothing mode, overriding the configured one
            display: Display mode, overriding the configured one
            with_game: Attach a NoteGame so stable values are judged
            **game_kwargs: Passed through to NoteGame
        """
        pipeline = TunerPipeline(
            estimator=self.create_estimator(),
            stability_filter=self.create_stability_filter(smoothing),
            game=self.create_game(**game_kwargs) if with_game else None,
            display_mode=display or self.config_manager.display_mode(),
        )
        logger.info(
            f"Created pipeline: smoothing={pipeline.stability_filter.mode} "
            f"display={pipeline.display_mode} game={with_game}"
        )
        return pipeline

    def create_live_provider(self, device_id: Optional[int] = None) -> LiveAudioProvider:
        config = self.config_manager.get_config("audio_input")
        return LiveAudioProvider(
            sample_rate=config["sample_rate"],
            chunk_size=config["chunk_size"],
            channels=config["channels"],
            device_id=device_id,
        )

    def create_wav_provider(self, file_path: str, **kwargs) -> WavFileAudioProvider:
        config = self.config_manager.get_config("audio_input")
        kwargs.setdefault("chunk_size", config["chunk_size"])
        return WavFileAudioProvider(file_path, **kwargs)

    def create_service(
        self, audio_provider: IAudioProvider, pipeline: TunerPipeline
    ) -> TunerService:
        config = self.config_manager.get_config("audio_input")
        return TunerService(
            audio_provider,
            pipeline,
            buffer_size=config["buffer_size"],
            frame_rate=config["frame_rate"],
        )
