"""Tests for convert_to_json_safe."""

import json
from datetime import date, datetime, timezone
from pathlib import Path

from teller.models.enums import AuditActionType, CardDisplayStatus
from teller.models.search_models import FieldError
from teller.utils.general import convert_to_json_safe


class TestConvertToJsonSafe:
    """Tests for convert_to_json_safe."""

    def test_scalars(self) -> None:
        assert convert_to_json_safe(None) is None
        assert convert_to_json_safe(True) is True
        assert convert_to_json_safe(7) == 7
        assert convert_to_json_safe("ESQUIVEL") == "ESQUIVEL"
        assert convert_to_json_safe(float("nan")) is None
        assert convert_to_json_safe(float("inf")) is None

    def test_enums_become_values(self) -> None:
        assert convert_to_json_safe(AuditActionType.VIEW_CARDS) == "view_cards"
        assert type(convert_to_json_safe(CardDisplayStatus.BLOCKED)) is str

    def test_dates(self) -> None:
        assert convert_to_json_safe(date(2025, 6, 15)) == "2025-06-15"
        stamp = datetime(2025, 6, 15, 10, 30, tzinfo=timezone.utc)
        assert convert_to_json_safe(stamp) == "2025-06-15T10:30:00+00:00"

    def test_nested_structures_and_models(self) -> None:
        payload = {
            1: (FieldError(field="rfc", message="RFC inválido"),),
            "tags": {"b", "a"},
            "path": Path("/tmp/x"),
        }

        result = convert_to_json_safe(payload)

        assert result == {
            "1": [{"field": "rfc", "message": "RFC inválido"}],
            "tags": ["a", "b"],
            "path": "/tmp/x",
        }
        json.dumps(result)
