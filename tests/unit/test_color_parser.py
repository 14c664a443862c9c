"""Unit tests for color parsing."""

import pytest

from color_indexer.colors.parser import get_format_priority, hsl_to_rgb, parse_color
from color_indexer.models import FALLBACK_FORMATS, ColorFormat


def channels(color) -> tuple[int, int, int]:
    return color.to_rgb255()


class TestHexParsing:
    """Tests for hex literals."""

    def test_six_digit_hex(self):
        color = parse_color("#ff0000")
        assert channels(color) == (255, 0, 0)
        assert color.alpha == 1.0
        assert color.original_format is ColorFormat.HEX

    def test_shorthand_is_expanded(self):
        assert channels(parse_color("#f00")) == (255, 0, 0)
        assert channels(parse_color("#abc")) == (0xAA, 0xBB, 0xCC)

    def test_eight_digit_hex_has_alpha(self):
        color = parse_color("#ff000080")
        assert color.alpha == pytest.approx(128 / 255)
        assert color.original_format is ColorFormat.HEX_ALPHA

    def test_four_digit_hex_has_alpha(self):
        color = parse_color("#f008")
        assert color.alpha == pytest.approx(0x88 / 255)
        assert color.original_format is ColorFormat.HEX_ALPHA

    def test_case_insensitive(self):
        assert channels(parse_color("#FFaa00")) == (255, 170, 0)

    @pytest.mark.parametrize("text", ["#ff", "#fffff", "#ggg", "#ff00001", "ff0000"])
    def test_invalid_hex(self, text):
        assert parse_color(text) is None


class TestRgbParsing:
    """Tests for rgb()/rgba() functions."""

    def test_comma_separated(self):
        color = parse_color("rgb(255, 128, 0)")
        assert channels(color) == (255, 128, 0)
        assert color.original_format is ColorFormat.RGB

    def test_space_separated_with_slash_alpha(self):
        color = parse_color("rgb(255 0 0 / 50%)")
        assert color.alpha == pytest.approx(0.5)
        assert color.original_format is ColorFormat.RGBA

    def test_rgba_spelling_without_alpha_is_rgba(self):
        color = parse_color("rgba(255, 0, 0)")
        assert color.alpha == 1.0
        assert color.original_format is ColorFormat.RGBA

    def test_fourth_argument_is_alpha(self):
        color = parse_color("rgb(0, 0, 0, 0.25)")
        assert color.alpha == pytest.approx(0.25)
        assert color.original_format is ColorFormat.RGBA

    def test_percentage_channels(self):
        assert channels(parse_color("rgb(100%, 50%, 0%)")) == (255, 128, 0)

    def test_channels_are_clamped(self):
        assert channels(parse_color("rgb(300, -5, 0)")) == (255, 0, 0)

    def test_alpha_is_clamped(self):
        assert parse_color("rgba(0, 0, 0, 2)").alpha == 1.0

    def test_unparseable_alpha_defaults_to_opaque(self):
        assert parse_color("rgba(0, 0, 0, abc)").alpha == 1.0

    def test_surrounding_whitespace_is_ignored(self):
        assert channels(parse_color("  rgb(1, 2, 3)  ")) == (1, 2, 3)

    @pytest.mark.parametrize(
        "text", ["rgb(1, 2)", "rgb(a, b, c)", "rgb(1e999, 0, 0)", "rgb()"]
    )
    def test_invalid_rgb(self, text):
        assert parse_color(text) is None


class TestHslParsing:
    """Tests for hsl()/hsla() functions and compact HSL."""

    def test_hsl_function(self):
        color = parse_color("hsl(120, 100%, 50%)")
        assert channels(color) == (0, 255, 0)
        assert color.original_format is ColorFormat.HSL

    def test_hue_with_unit(self):
        assert channels(parse_color("hsl(120deg 100% 50%)")) == (0, 255, 0)

    def test_hsla_with_alpha(self):
        color = parse_color("hsla(0, 100%, 50%, 0.5)")
        assert channels(color) == (255, 0, 0)
        assert color.alpha == pytest.approx(0.5)
        assert color.original_format is ColorFormat.HSLA

    def test_hue_is_clamped(self):
        # 400 clamps to 360, which is red again
        assert channels(parse_color("hsl(400, 100%, 50%)")) == (255, 0, 0)

    def test_compact_hsl(self):
        color = parse_color("210 40% 96.1%")
        assert color is not None
        assert color.original_format is ColorFormat.TAILWIND

    def test_compact_hsl_with_alpha(self):
        color = parse_color("0 100% 50% / 0.5")
        assert channels(color) == (255, 0, 0)
        assert color.alpha == pytest.approx(0.5)

    def test_grayscale(self):
        assert channels(parse_color("0 0% 100%")) == (255, 255, 255)

    @pytest.mark.parametrize("text", ["hsl(1, 2)", "210 40 96%", "hsl(x, 10%, 10%)"])
    def test_invalid_hsl(self, text):
        assert parse_color(text) is None


class TestParseColorMisc:
    """Tests for inputs matching none of the grammars."""

    @pytest.mark.parametrize("text", ["", "red", "var(--primary)", "not a color"])
    def test_unsupported_text(self, text):
        assert parse_color(text) is None

    def test_css_string(self):
        assert parse_color("#ff0000").css_string == "rgb(255, 0, 0)"
        assert parse_color("rgba(0, 0, 0, 0.5)").css_string == "rgba(0, 0, 0, 0.5)"


class TestFormatPriority:
    """Tests for format priority seeding."""

    def test_original_first_then_fallbacks(self):
        priority = get_format_priority(ColorFormat.HEX)
        assert priority[0] is ColorFormat.HEX
        assert list(priority[1:]) == [f for f in FALLBACK_FORMATS if f is not ColorFormat.HEX]

    def test_no_duplicates(self):
        priority = get_format_priority(ColorFormat.RGBA)
        assert len(priority) == len(set(priority)) == len(FALLBACK_FORMATS)


class TestHslToRgb:
    """Tests for the hue-sector conversion."""

    @pytest.mark.parametrize(
        "hsl,rgb",
        [
            ((0, 100, 50), (255, 0, 0)),
            ((120, 100, 50), (0, 255, 0)),
            ((240, 100, 50), (0, 0, 255)),
            ((0, 0, 0), (0, 0, 0)),
            ((0, 0, 50), (128, 128, 128)),
        ],
    )
    def test_known_values(self, hsl, rgb):
        assert hsl_to_rgb(*hsl) == rgb
