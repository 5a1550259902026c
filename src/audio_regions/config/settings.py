# File: audio_regions/config/settings.py

import os

from audio_regions.domain.region import RegionParams


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


class Settings:
    # --- Auto-segmentation defaults ---
    SILENCE_THRESHOLD: float = _env_float("AUDIO_REGIONS_SILENCE_THRESHOLD", 0.002)
    TIME_THRESHOLD: float = _env_float("AUDIO_REGIONS_TIME_THRESHOLD", 0.05)
    SEG_LEN_THRESHOLD: float = _env_float("AUDIO_REGIONS_SEG_LEN_THRESHOLD", 0.5)
    MIN_PEAKS: int = 512
    MAX_PEAKS: int = 512 * 16

    # --- Transport ---
    # a position report within this window counts as "at" a target
    NEAR_THRESHOLD: float = _env_float("AUDIO_REGIONS_NEAR_THRESHOLD", 0.3)
    END_SNAP_THRESHOLD: float = 0.2

    # --- Editing ---
    DELETE_BACKOFF: float = 0.03
    MIN_LOADED_REGION_LENGTH: float = 0.03
    MIN_REGION_LENGTH: float = 0.01
    BOUNDARY_DECIMALS: int = 3

    # --- Output ---
    WAV_FLOAT: bool = os.getenv("AUDIO_REGIONS_WAV_FLOAT", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("AUDIO_REGIONS_LOG_LEVEL", "INFO")

    def default_region_params(self) -> RegionParams:
        return RegionParams(
            silence_threshold=self.SILENCE_THRESHOLD,
            time_threshold=self.TIME_THRESHOLD,
            seg_len_threshold=self.SEG_LEN_THRESHOLD,
        )


settings = Settings()
