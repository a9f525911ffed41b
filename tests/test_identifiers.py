import pytest

from core.domain.identifiers import validate_identifier, validate_identifiers
from core.errors import InvalidIdentifierError


def test_validate_identifier_normalizes_case_and_whitespace():
    raw = "  AAAAAAAA-bbbb-CCCC-dddd-EEEEEEEEEEEE \n"
    assert validate_identifier(raw) == "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"


def test_validate_identifier_accepts_braces():
    assert validate_identifier("{11111111-1111-1111-1111-111111111111}") == "11111111-1111-1111-1111-111111111111"


@pytest.mark.parametrize(
    "raw",
    [
        "not-a-guid",
        "11111111111111111111111111111111",
        "urn:uuid:11111111-1111-1111-1111-111111111111",
        "11111111-1111-1111-1111-11111111111",
        "g1111111-1111-1111-1111-111111111111",
        "{11111111-1111-1111-1111-111111111111",
        "11111111-1111-1111-1111-111111111111}",
    ],
)
def test_validate_identifier_rejects_malformed(raw):
    with pytest.raises(InvalidIdentifierError) as exc_info:
        validate_identifier(raw)
    assert exc_info.value.raw == raw


def test_validate_identifiers_skips_blank_silently_and_reports_malformed():
    result = validate_identifiers(
        [
            "",
            "   ",
            "11111111-1111-1111-1111-111111111111",
            "not-a-guid",
            "22222222-2222-2222-2222-222222222222",
        ]
    )

    assert result.identifiers == [
        "11111111-1111-1111-1111-111111111111",
        "22222222-2222-2222-2222-222222222222",
    ]
    assert [r.raw for r in result.rejections] == ["not-a-guid"]


def test_validate_identifiers_collapses_duplicates_keeping_first():
    result = validate_identifiers(
        [
            "22222222-2222-2222-2222-222222222222",
            "11111111-1111-1111-1111-111111111111",
            "22222222-2222-2222-2222-222222222222".upper(),
        ]
    )
    assert result.identifiers == [
        "22222222-2222-2222-2222-222222222222",
        "11111111-1111-1111-1111-111111111111",
    ]
    assert result.rejections == []
