"""
Utility Tests
===============

Tests for log setup, the config fingerprint and CLI file helpers.
"""

from __future__ import annotations

import json
import logging

import pytest

from citetrail.utils import (
    JsonLogFormatter,
    compute_hash,
    generate_run_id,
    load_json,
    save_json,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger("citetrail").handlers.clear()


class TestLogging:

    def test_single_handler_after_repeated_setup(self):
        setup_logging()
        logger = setup_logging(level="debug")
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        assert setup_logging(level="chatty").level == logging.INFO

    def test_json_formatter_tags_run_id(self):
        record = logging.LogRecord(
            "citetrail.cite.extractor", logging.INFO, __file__, 1, "Extracted %d citations", (2,), None,
        )
        entry = json.loads(JsonLogFormatter("citetrail-test").format(record))
        assert entry["message"] == "Extracted 2 citations"
        assert entry["logger"] == "citetrail.cite.extractor"
        assert entry["run_id"] == "citetrail-test"

    def test_run_id_shape(self):
        assert generate_run_id().startswith("citetrail-")
        assert generate_run_id() != generate_run_id()


class TestHashAndFiles:

    def test_hash_ignores_key_order(self):
        assert compute_hash({"a": 1, "b": 2}) == compute_hash({"b": 2, "a": 1})
        assert len(compute_hash({"a": 1}, length=8)) == 8

    def test_json_file_keeps_unicode(self, tmp_path):
        path = save_json({"snippet": "caf\u00e9"}, tmp_path / "out" / "block.json")
        assert "caf\u00e9" in path.read_text(encoding="utf-8")
        assert load_json(path) == {"snippet": "caf\u00e9"}
