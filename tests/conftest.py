import pytest

from backend.models.schemas import ReframeSettings


@pytest.fixture
def settings() -> ReframeSettings:
    return ReframeSettings(
        high_confidence_threshold=95.0,
        padding_factor_base=1.0,
        significant_movement_threshold=0.7,
        job_check_delay_ms=0,
        job_max_wait_sec=5,
        poll_max_retries=3,
        min_shot_duration_sec=0.6,
        confidence_threshold=85.0,
        crop_change_tolerance=0.6,
        smooth_crops=False,
    )
