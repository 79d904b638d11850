import json
import logging

from services.detection_service.src import logging as detection_logging
from services.detection_service.src.config import settings

def _service_records(caplog):
    return [r for r in caplog.records if r.name == settings.service_name]

def test_jlog_uses_service_settings(caplog):
    caplog.set_level(logging.INFO, logger=settings.service_name)

    detection_logging.jlog(event="detect_ok", classification="HUMAN")

    record = json.loads(_service_records(caplog)[-1].getMessage())
    assert record["event"] == "detect_ok"
    assert record["service"] == settings.service_name
    assert record["env"] == settings.environment
    assert record["classification"] == "HUMAN"

def test_jlog_severity_maps_to_log_level(caplog):
    caplog.set_level(logging.INFO, logger=settings.service_name)

    detection_logging.jlog(event="detect_output_invalid", severity="WARNING")

    assert _service_records(caplog)[-1].levelno == logging.WARNING

def test_hash_preview_hides_payload():
    preview = detection_logging.hash_preview("AAAA")
    assert "AAAA" not in preview
    assert preview.endswith("len=4")
