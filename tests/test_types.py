import pytest

from themecheck.types import Position, Severity


class TestSeverity:

    @pytest.mark.parametrize("value, expected", [
        ("error", Severity.ERROR),
        ("Warning", Severity.WARNING),
        (" INFO ", Severity.INFO),
        (0, Severity.ERROR),
        (2, Severity.INFO),
        (Severity.WARNING, Severity.WARNING),
    ])
    def test_parse(self, value, expected):
        assert Severity.parse(value) is expected

    @pytest.mark.parametrize("value", ["fatal", 3, True, None, 1.0])
    def test_parse_rejects(self, value):
        with pytest.raises(ValueError, match="expected one of error, warning, info"):
            Severity.parse(value)

    def test_lower_is_more_severe(self):
        assert Severity.ERROR < Severity.WARNING < Severity.INFO


class TestPosition:

    def test_empty_range_is_valid(self):
        assert Position(3, 3).slice("abcdef") == ""

    def test_slice(self):
        assert Position(1, 3).slice("abcdef") == "bc"

    @pytest.mark.parametrize("start, end", [(-1, 2), (5, 4)])
    def test_invalid(self, start, end):
        with pytest.raises(ValueError, match="Invalid position range"):
            Position(start, end)

    def test_within(self):
        assert Position(0, 3).within("abc")
        assert not Position(0, 4).within("abc")


def test_tool_version_is_a_version_string():
    from themecheck import tool_version

    assert tool_version().count(".") >= 2
