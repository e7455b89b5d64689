import pytest

from nyantify_mcp.i18n import format_duration, get_translations


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0s"), (45, "45s"), (59, "59s"), (60, "1min"), (125, "2min5s"), (3600, "60min")],
)
def test_format_duration_english(seconds: int, expected: str) -> None:
    assert format_duration(seconds) == expected


def test_format_duration_localized_units() -> None:
    assert format_duration(125, "zh") == "2分钟5秒"
    assert format_duration(120, "ja") == "2分"
    assert format_duration(30, "ja") == "30秒"


def test_format_duration_rejects_negative() -> None:
    with pytest.raises(ValueError):
        format_duration(-1)


def test_unknown_language_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported language"):
        get_translations("fr")


def test_finished_after_template() -> None:
    strings = get_translations("en")
    body = strings.finished_after.format(name="Build", duration="1min")
    assert body == '"Build" finished after 1min'
