"""
Unit tests for model identifier parsing.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_comments.app.domain.model_id import ModelId, validate_namespace
from shared.errors import InvalidIdentifierError


class TestModelId:
    """Test cases for ModelId."""

    def test_parse_pretty_format(self):
        """Test parsing a well-formed identifier."""
        model_id = ModelId.parse("com.example.devices:Thermostat:1.0.0")

        assert model_id.namespace == "com.example.devices"
        assert model_id.name == "Thermostat"
        assert model_id.version == "1.0.0"
        assert model_id.pretty_format == "com.example.devices:Thermostat:1.0.0"

    def test_parse_is_canonical(self):
        """Test the same string always yields the same namespace."""
        first = ModelId.parse("org.acme:Pump:3.2.1-beta")
        second = ModelId.parse("org.acme:Pump:3.2.1-beta")

        assert first == second
        assert str(first) == "org.acme:Pump:3.2.1-beta"

    @pytest.mark.parametrize("value", [
        "",
        "com.example:Thermostat",
        "com.example::1.0.0",
        ":Thermostat:1.0.0",
        "com.example:Thermostat:one",
        "com..example:Thermostat:1.0.0",
        "com.example:Thermo-stat:1.0.0",
        "com.example:extra:Thermostat:1.0.0",
    ])
    def test_parse_malformed(self, value):
        """Test malformed identifiers are rejected."""
        with pytest.raises(InvalidIdentifierError):
            ModelId.parse(value)

    def test_parse_non_string(self):
        """Test non-string input is rejected."""
        with pytest.raises(InvalidIdentifierError):
            ModelId.parse(None)

    def test_validate_namespace(self):
        """Test namespace validation."""
        assert validate_namespace("com.example") == "com.example"

        with pytest.raises(InvalidIdentifierError) as exc_info:
            validate_namespace("com.example.")

        assert exc_info.value.code == "INVALID_IDENTIFIER"
        assert exc_info.value.status_code == 400
