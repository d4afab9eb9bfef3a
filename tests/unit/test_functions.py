"""Tests for the built-in marker functions."""

import base64

import pytest

from style_shifter.functions import (
    BUILTIN_FUNCTIONS,
    FunctionRegistry,
    invert,
    map_svg_colors,
    opacify,
    printf,
    tint,
    to_px,
    to_rem,
    url,
)
from style_shifter.theme import Theme


@pytest.fixture
def theme() -> Theme:
    """Theme passed through to the functions."""
    return Theme("test", "theme", {"color": "#ff0000", "size": 16})


def _decode(data_uri: str) -> str:
    return base64.b64decode(data_uri.split(",", 1)[1]).decode("utf-8")


class TestUrl:
    """Tests for url()."""

    def test_wraps_path(self, theme: Theme) -> None:
        assert url("", theme, "", 0, ["image.png"]) == "url(image.png)"

    def test_keeps_protocol(self, theme: Theme) -> None:
        assert url("", theme, "", 0, ["https://example.com/img.jpg"]) == "url(https://example.com/img.jpg)"

    def test_missing_argument(self, theme: Theme) -> None:
        assert url("", theme, "", 0, [None]) is None
        assert url("", theme, "", 0, []) is None


class TestToPx:
    """Tests for toPx()."""

    def test_unitless_number(self, theme: Theme) -> None:
        assert to_px("", theme, "", 0, [16]) == "16px"

    def test_string_number(self, theme: Theme) -> None:
        assert to_px("", theme, "", 0, ["24"]) == "24px"

    def test_keeps_px_values(self, theme: Theme) -> None:
        assert to_px("", theme, "", 0, ["16px"]) == "16px"

    def test_decimal(self, theme: Theme) -> None:
        assert to_px("", theme, "", 0, ["16.5"]) == "16.5px"

    def test_not_a_number(self, theme: Theme) -> None:
        assert to_px("", theme, "", 0, ["wide"]) is None

    def test_missing_argument(self, theme: Theme) -> None:
        assert to_px("", theme, "", 0, [None]) is None


class TestToRem:
    """Tests for toRem()."""

    def test_default_base(self, theme: Theme) -> None:
        assert to_rem("", theme, "", 0, ["16px"]) == "1rem"

    def test_custom_base(self, theme: Theme) -> None:
        assert to_rem("", theme, "", 0, ["32px", "16"]) == "2rem"

    def test_rebases_rem_values(self, theme: Theme) -> None:
        assert to_rem("", theme, "", 0, ["1rem", "20"]) == "1.25rem"

    def test_rem_with_old_base(self, theme: Theme) -> None:
        assert to_rem("", theme, "", 0, ["2rem", "16", "8"]) == "1rem"

    def test_zero_base_gives_no_result(self, theme: Theme) -> None:
        assert to_rem("", theme, "", 0, ["16px", "0"]) is None

    def test_negative_base_gives_no_result(self, theme: Theme) -> None:
        assert to_rem("", theme, "", 0, ["16px", "-4"]) is None

    def test_missing_argument(self, theme: Theme) -> None:
        assert to_rem("", theme, "", 0, [None]) is None


class TestOpacify:
    """Tests for opacify()."""

    def test_hex_color(self, theme: Theme) -> None:
        assert opacify("", theme, "", 0, ["#ff0000", "0.5"]) == "#ff000080"

    def test_shorthand_hex_is_expanded(self, theme: Theme) -> None:
        assert opacify("", theme, "", 0, ["#f00", "0.75"]) == "#ff0000bf"

    def test_rgb_color(self, theme: Theme) -> None:
        assert opacify("", theme, "", 0, ["rgb(255, 0, 0)", "0.5"]) == "rgba(255, 0, 0, 0.5)"

    def test_clamps_amount(self, theme: Theme) -> None:
        assert opacify("", theme, "", 0, ["#ff0000", "2"]) == "#ff0000ff"
        assert opacify("", theme, "", 0, ["#ff0000", "-1"]) == "#ff000000"

    @pytest.mark.parametrize(
        ("amount", "expected_alpha"),
        [(0, 0), (0.2, 51), (0.25, 64), (0.5, 128), (0.75, 191), (1, 255)],
    )
    def test_alpha_channel_rounds(self, theme: Theme, amount: float, expected_alpha: int) -> None:
        result = opacify("", theme, "", 0, ["#336699", str(amount)])
        assert result is not None
        assert int(result[7:9], 16) == expected_alpha

    def test_missing_color(self, theme: Theme) -> None:
        assert opacify("", theme, "", 0, [None, "0.5"]) is None

    def test_not_a_color(self, theme: Theme) -> None:
        assert opacify("", theme, "", 0, ["16px", "0.5"]) is None


class TestTint:
    """Tests for tint()."""

    def test_halfway(self, theme: Theme) -> None:
        assert tint("", theme, "", 0, ["#000000", "#ffffff", "0.5"]) == "rgba(128, 128, 128, 1)"

    def test_percentage_amount(self, theme: Theme) -> None:
        assert tint("", theme, "", 0, ["#000000", "#ffffff", "50%"]) == "rgba(128, 128, 128, 1)"

    def test_default_amount(self, theme: Theme) -> None:
        assert tint("", theme, "", 0, ["#000000", "#ffffff"]) == "rgba(128, 128, 128, 1)"

    def test_clamps_amount(self, theme: Theme) -> None:
        assert tint("", theme, "", 0, ["#000000", "#ffffff", "2"]) == "rgba(255, 255, 255, 1)"
        assert tint("", theme, "", 0, ["#000000", "#ffffff", "-1"]) == "rgba(0, 0, 0, 1)"

    def test_zero_amount_keeps_base(self, theme: Theme) -> None:
        assert tint("", theme, "", 0, ["#123456", "#ffffff", "0"]) == "rgba(18, 52, 86, 1)"

    def test_numeric_zero_amount_keeps_base(self, theme: Theme) -> None:
        assert tint("", theme, "", 0, ["#123456", "#ffffff", 0]) == "rgba(18, 52, 86, 1)"

    def test_empty_amount_uses_default(self, theme: Theme) -> None:
        assert tint("", theme, "", 0, ["#000000", "#ffffff", ""]) == "rgba(128, 128, 128, 1)"

    def test_full_amount_scaled_by_tint_alpha(self, theme: Theme) -> None:
        result = tint("", theme, "", 0, ["rgba(0, 0, 0, 0.25)", "rgba(255, 255, 255, 0.5)", "1"])
        assert result == "rgba(128, 128, 128, 0.25)"

    def test_preserves_base_alpha(self, theme: Theme) -> None:
        assert tint("", theme, "", 0, ["rgba(0, 0, 0, 0.5)", "#ffffff", "0.5"]) == "rgba(128, 128, 128, 0.5)"

    def test_missing_arguments(self, theme: Theme) -> None:
        assert tint("", theme, "", 0, [None, "#ffffff", "0.5"]) is None
        assert tint("", theme, "", 0, ["#000000", None, "0.5"]) is None


class TestInvert:
    """Tests for invert()."""

    def test_black_to_white(self, theme: Theme) -> None:
        assert invert("", theme, "", 0, ["#000000"]) == "rgba(255, 255, 255, 1)"

    def test_white_to_black(self, theme: Theme) -> None:
        assert invert("", theme, "", 0, ["#ffffff"]) == "rgba(0, 0, 0, 1)"

    def test_red_to_cyan(self, theme: Theme) -> None:
        assert invert("", theme, "", 0, ["#ff0000"]) == "rgba(0, 255, 255, 1)"

    def test_rgb_input(self, theme: Theme) -> None:
        assert invert("", theme, "", 0, ["rgb(100, 150, 200)"]) == "rgba(155, 105, 55, 1)"

    def test_preserves_alpha(self, theme: Theme) -> None:
        assert invert("", theme, "", 0, ["rgba(255, 0, 0, 0.5)"]) == "rgba(0, 255, 255, 0.5)"

    @pytest.mark.parametrize(
        ("color", "expected"),
        [
            ("#336699", "rgba(51, 102, 153, 1)"),
            ("rgb(1, 2, 3)", "rgba(1, 2, 3, 1)"),
            ("rgba(10, 20, 30, 0.25)", "rgba(10, 20, 30, 0.25)"),
        ],
    )
    def test_double_inversion_restores_channels(self, theme: Theme, color: str, expected: str) -> None:
        once = invert("", theme, "", 0, [color])
        assert invert("", theme, "", 0, [once]) == expected

    def test_missing_argument(self, theme: Theme) -> None:
        assert invert("", theme, "", 0, [None]) is None


class TestPrintf:
    """Tests for printf()."""

    def test_replaces_tokens(self, theme: Theme) -> None:
        assert printf("", theme, "", 0, ["%1 %2!", "Hello", "World"]) == "Hello World!"

    def test_unmatched_token_is_kept(self, theme: Theme) -> None:
        assert printf("", theme, "", 0, ["%1 %2 %3!", "Hello", "World"]) == "Hello World %3!"

    def test_repeated_token(self, theme: Theme) -> None:
        assert printf("", theme, "", 0, ["%1 and %1", "test"]) == "test and test"

    def test_non_sequential_tokens(self, theme: Theme) -> None:
        assert printf("", theme, "", 0, ["%2 %1", "second", "first"]) == "first second"

    def test_css_template(self, theme: Theme) -> None:
        assert printf("", theme, "", 0, ["%1px solid %2", 2, "#000"]) == "2px solid #000"

    def test_template_without_tokens(self, theme: Theme) -> None:
        assert printf("", theme, "", 0, ["Hello World"]) == "Hello World"

    def test_missing_template(self, theme: Theme) -> None:
        assert printf("", theme, "", 0, [None]) is None


class TestMapSvgColors:
    """Tests for mapSvgColors()."""

    SVG = '<svg><circle fill="#FF0000"/><rect fill="#00FF00"/></svg>'

    def test_single_color(self, theme: Theme) -> None:
        result = map_svg_colors("", theme, "", 0, [self.SVG, "#FF0000", "#0000FF"])
        assert result is not None
        assert result.startswith("data:image/svg+xml;base64,")
        decoded = _decode(result)
        assert "#0000FF" in decoded
        assert "#FF0000" not in decoded

    def test_multiple_colors(self, theme: Theme) -> None:
        result = map_svg_colors("", theme, "", 0, [self.SVG, "#FF0000|#00FF00", "#111111", "#222222"])
        assert result is not None
        decoded = _decode(result)
        assert '"#111111"' in decoded
        assert '"#222222"' in decoded

    def test_original_without_hash(self, theme: Theme) -> None:
        result = map_svg_colors("", theme, "", 0, [self.SVG, "FF0000", "#AAAAAA"])
        assert result is not None
        assert 'fill="#AAAAAA"' in _decode(result)

    def test_replacement_without_hash(self, theme: Theme) -> None:
        result = map_svg_colors("", theme, "", 0, [self.SVG, "#FF0000", "abcdef"])
        assert result is not None
        assert 'fill="#abcdef"' in _decode(result)

    def test_case_insensitive(self, theme: Theme) -> None:
        result = map_svg_colors("", theme, "", 0, ['<svg><circle fill="#ff0000"/></svg>', "#FF0000", "#ABCDEF"])
        assert result is not None
        assert "#ABCDEF" in _decode(result)

    def test_invalid_inputs(self, theme: Theme) -> None:
        assert map_svg_colors("", theme, "", 0, []) is None
        assert map_svg_colors("", theme, "", 0, [self.SVG]) is None
        assert map_svg_colors("", theme, "", 0, [None, "#FF0000", "#000"]) is None

    def test_count_mismatch(self, theme: Theme) -> None:
        assert map_svg_colors("", theme, "", 0, [self.SVG, "#FF0000|#00FF00", "#111111"]) is None


class TestFunctionRegistry:
    """Tests for FunctionRegistry."""

    def test_seeded_with_builtins(self) -> None:
        registry = FunctionRegistry()
        for name in ("url", "toPx", "toRem", "opacify", "tint", "invert", "printf", "mapSvgColors"):
            assert name in registry
        assert set(registry) == set(BUILTIN_FUNCTIONS)

    def test_register_custom(self) -> None:
        registry = FunctionRegistry()
        registry.register("custom", lambda *_: "custom-result")
        fn = registry.get("custom")
        assert fn is not None
        assert fn("", None, "", 0, []) == "custom-result"

    def test_override_builtin(self) -> None:
        registry = FunctionRegistry()

        def custom_url(*_: object) -> str:
            return "custom-url"

        registry.register("url", custom_url)
        assert registry.get("url") is custom_url

    def test_unknown_name(self) -> None:
        assert FunctionRegistry().get("nope") is None

    def test_empty_registry(self) -> None:
        assert "url" not in FunctionRegistry({})
