from pathlib import Path

import pytest

from credit_analyzer.config.settings import Settings


@pytest.fixture()
def integration_settings(tmp_path: Path) -> Settings:
    return Settings(
        uploads_dir=tmp_path / "uploads",
        temp_dir=tmp_path / "temp",
        inference_retry_delay_seconds=0,
        inference_max_retries=1,
        pdf_render_dpi=50,
        cleanup_delay_seconds=0,
    )
