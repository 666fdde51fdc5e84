from datetime import time

from src.booking_engine.config import Settings


def test_settings_read_prefixed_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("BPE_DAY_START_TIME", "07:30")
    monkeypatch.setenv("BPE_MIN_TIME_SAVED_MINUTES", "20")
    monkeypatch.setenv("BPE_DATA_ROOT", str(tmp_path))

    configured = Settings()

    assert configured.day_start_time == time(7, 30)
    assert configured.min_time_saved_minutes == 20
    assert configured.data_root == tmp_path.resolve()


def test_settings_only_carry_engine_options():
    assert "app_name" not in Settings.model_fields
    assert {"osrm_base_url", "oracle_timeout_seconds", "travel_buffer_minutes"} <= set(Settings.model_fields)
