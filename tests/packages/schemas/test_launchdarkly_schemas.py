"""Tests for LaunchDarkly flag and outcome schemas."""

import pytest
from pydantic import ValidationError

from packages.schemas.launchdarkly import (
    FailedFlag,
    FlagRecord,
    RunResult,
    SkippedFlag,
    UpdatedFlag,
)


@pytest.mark.unit
class TestFlagRecord:
    def test_parses_api_payload(self) -> None:
        flag = FlagRecord.model_validate(
            {
                "key": "new-checkout",
                "name": "New checkout",
                "kind": "boolean",
                "creationDate": 1752875955933,
                "customProperties": {
                    "flag.expiry.date": {"name": "Expiry", "value": ["08/17/2025"]},
                    "jira.issues": {"name": "Jira", "value": []},
                },
            }
        )

        assert flag.creation_date == 1752875955933
        assert flag.existing_value("flag.expiry.date") == "08/17/2025"
        assert flag.has_property_value("flag.expiry.date")

    def test_empty_value_list_counts_as_missing(self) -> None:
        flag = FlagRecord.model_validate(
            {"key": "a", "customProperties": {"jira.issues": {"name": "Jira", "value": []}}}
        )
        assert flag.existing_value("jira.issues") is None
        assert not flag.has_property_value("jira.issues")

    def test_missing_optional_fields(self) -> None:
        flag = FlagRecord.model_validate({"key": "bare"})
        assert flag.name == ""
        assert flag.creation_date is None
        assert flag.custom_properties == {}

    @pytest.mark.parametrize("raw", [{"x": 1}, [1752875955933], True])
    def test_unexpected_creation_date_types_are_kept_raw(self, raw: object) -> None:
        flag = FlagRecord.model_validate({"key": "odd", "creationDate": raw})
        assert flag.creation_date == raw

    def test_key_is_required(self) -> None:
        with pytest.raises(ValidationError):
            FlagRecord.model_validate({"name": "no key"})


@pytest.mark.unit
class TestOutcomes:
    def test_updated_flag_dumps_camel_case(self) -> None:
        updated = UpdatedFlag(
            key="new-checkout",
            name="New checkout",
            creation_date="2025-07-18",
            calculated_expiry_date="08/17/2025",
            days_from_creation=30,
            custom_property_name="flag.expiry.date",
        )

        assert updated.model_dump(by_alias=True) == {
            "key": "new-checkout",
            "name": "New checkout",
            "creationDate": "2025-07-18",
            "calculatedExpiryDate": "08/17/2025",
            "daysFromCreation": 30,
            "customPropertyName": "flag.expiry.date",
        }

    def test_skipped_flag_omits_empty_fields(self) -> None:
        skipped = SkippedFlag(key="a", name="A", reason="Invalid or missing creation date")
        assert skipped.model_dump(by_alias=True, exclude_none=True) == {
            "key": "a",
            "name": "A",
            "reason": "Invalid or missing creation date",
        }

    def test_skip_reason_breakdown_folds_existing(self) -> None:
        result = RunResult(
            skipped_flags=[
                SkippedFlag(key="a", name="A", reason="Already has flag.expiry.date"),
                SkippedFlag(key="b", name="B", reason="Already has other.prop"),
                SkippedFlag(key="c", name="C", reason="Invalid or missing creation date"),
            ]
        )

        assert result.skip_reason_breakdown() == {
            "Already has expiry": 2,
            "Invalid or missing creation date": 1,
        }

    def test_has_failures(self) -> None:
        assert not RunResult().has_failures
        assert RunResult(failed_flags=[FailedFlag(key="a", name="A", error="boom")]).has_failures
