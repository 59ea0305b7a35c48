import altair as alt


def apply_theme() -> None:
    alt.theme.enable("none")
    alt.data_transformers.disable_max_rows()


FONT = "system-ui"
TITLE_FONT_SIZE = 16
LABEL_FONT_SIZE = 12
SMALL_FONT_SIZE = 11

BAR_FILL = "#7aa6ff"
SERIES_COLORS = ["#4e79a7", "#f28e2c", "#59a14f", "#e15759", "#9c755f"]
MEASURE_COLORS = {"gdp": "#4e79a7", "net": "#f28e2c"}
DOT_STROKE = "#1f3c88"
AXIS_COLOR = "#333333"
VALUE_TEXT = "#222222"
MUTED_TEXT = "#666666"
