"""
Test suite for plotter module

Covers the scale mapper, the nearest-date Point Index, both interaction
controllers, annotation formatting, figure construction and the Dash callback
handlers.
"""

from datetime import date, datetime, timedelta
from typing import List
from unittest.mock import patch

import pytest
from dash import no_update

from dataloader.records_loader import PollRecord, PredictionRecord
from plotter.AnnotationRenderer_plotter import (
    format_headline,
    format_pct,
    format_poll_tooltip,
    lagged_display_month,
)
from plotter.CallbackHandler_plotter import CallbackHandler
from plotter.ChartComponents_plotter import ChartComponents
from plotter.InteractionController_plotter import (
    DEFAULT_MARKER,
    INITIAL_MARKER,
    InteractionState,
    LineInteractionController,
    ScatterInteractionController,
)
from plotter.PointIndex_plotter import PointIndex
from plotter.ScaleMapper_plotter import LinearScale, TimeScale, build_scales

PLOT_WIDTH = 710
PLOT_HEIGHT = 460


def make_polls() -> List[PollRecord]:
    return [
        PollRecord(date(2021, 6, 15), "IFOP", "internet", 41.0, 57.0, 1002),
        PollRecord(date(2021, 6, 18), "Elabe", "internet", 38.0, 60.0, 1000),
        PollRecord(date(2021, 6, 20), "IFOP", "telephone", 40.0, 58.0, 951),
        PollRecord(date(2021, 7, 2), "Harris Interactive", "internet", 39.0, 59.0, 900),
    ]


def make_predictions(count: int = 60, start: date = date(2020, 1, 1)) -> List[PredictionRecord]:
    records = []
    for i in range(count):
        mean = 40.0 + (i % 5)
        records.append(
            PredictionRecord(
                date=start + timedelta(days=7 * i),
                mean_pct=mean,
                hdi50_low=mean - 2,
                hdi50_high=mean + 2,
                hdi_outer_low=mean - 5,
                hdi_outer_high=mean + 5,
            )
        )
    return records


class TestScaleMapper:
    def setup_method(self) -> None:
        self.x, self.y = build_scales(PLOT_WIDTH, PLOT_HEIGHT)

    def test_time_scale_endpoints(self) -> None:
        assert self.x(date(2017, 5, 1)) == pytest.approx(0)
        assert self.x("2022-05-01") == pytest.approx(PLOT_WIDTH)

    def test_time_scale_invert(self) -> None:
        moment = datetime(2019, 11, 3, 12)
        assert abs(self.x.invert(self.x(moment)) - moment) < timedelta(seconds=1)

    def test_invert_outside_domain(self) -> None:
        assert self.x.invert(-10) < datetime(2017, 5, 1)

    def test_linear_scale_is_flipped(self) -> None:
        assert self.y(0) == pytest.approx(PLOT_HEIGHT)
        assert self.y(100) == pytest.approx(0)
        assert self.y.invert(PLOT_HEIGHT / 2) == pytest.approx(50)

    def test_degenerate_domain(self) -> None:
        with pytest.raises(ValueError):
            LinearScale((1, 1), (0, 10))


class TestPointIndex:
    def setup_method(self) -> None:
        self.x_scale = TimeScale(("2017-05-01", "2022-05-01"), (0, PLOT_WIDTH))
        self.records = make_predictions()
        self.index = PointIndex(self.records, self.x_scale)

    def test_rounds_to_right_neighbour(self) -> None:
        left = self.x_scale(self.records[10].date)
        right = self.x_scale(self.records[11].date)
        # 即使游標非常接近左側紀錄，仍回傳右側紀錄
        i, record = self.index.lookup(left + 0.01 * (right - left))
        assert i == 11
        assert record is self.records[11]

    def test_projection_not_left_of_cursor(self) -> None:
        first = self.x_scale(self.records[0].date)
        last = self.x_scale(self.records[-1].date)
        steps = 200
        for k in range(steps + 1):
            x = first + (last - first) * k / steps
            _, record = self.index.lookup(x)
            assert self.x_scale(record.date) >= x - 1e-6

    def test_index_non_decreasing(self) -> None:
        indices = [self.index.lookup(x / 4)[0] for x in range(0, PLOT_WIDTH * 4 + 1)]
        assert indices == sorted(indices)

    def test_left_of_first_record(self) -> None:
        assert self.index.lookup(0)[0] == 0

    def test_last_record_is_clamped(self) -> None:
        last_x = self.x_scale(self.records[-1].date)
        i, record = self.index.lookup(last_x)
        assert i == len(self.records) - 1
        assert record is self.records[-1]

    def test_past_last_record(self) -> None:
        assert self.index.bisect(PLOT_WIDTH) == len(self.records)
        i, record = self.index.lookup(PLOT_WIDTH)
        assert i == len(self.records) - 1
        assert record is self.records[-1]

    def test_floor_of_one(self) -> None:
        index = PointIndex(self.records, self.x_scale, floor=1)
        assert index.lookup(0)[0] == 1

    def test_empty_index(self) -> None:
        with pytest.raises(LookupError):
            PointIndex([], self.x_scale).lookup(10)


class TestAnnotationRenderer:
    def test_lagged_display_month(self) -> None:
        assert lagged_display_month(date(2021, 6, 15)) == "May 2021"

    def test_lagged_display_month_crosses_year(self) -> None:
        assert lagged_display_month(date(2021, 1, 10)) == "December 2020"

    def test_lagged_display_month_end_of_month(self) -> None:
        assert lagged_display_month(date(2021, 3, 31)) == "February 2021"

    def test_format_pct_one_decimal(self) -> None:
        assert format_pct(100 * 0.57) == "57.0"
        assert format_pct(41.26) == "41.3"

    def test_poll_tooltip(self) -> None:
        lines = format_poll_tooltip(make_polls()[0])
        assert lines == [
            "Pollster: IFOP",
            "Method: internet",
            "Approve: 41.0%",
            "Disapprove: 57.0%",
            "Sample: 1002",
            "Field date: 15 Jun 2021",
        ]

    def test_headline(self) -> None:
        assert format_headline(make_predictions()[2]) == "42.0% approve"


class TestScatterInteractionController:
    def setup_method(self) -> None:
        self.records = make_polls()
        self.controller = ScatterInteractionController(self.records)

    def test_initial_state(self) -> None:
        assert self.controller.state is InteractionState.IDLE
        assert self.controller.selected_pollster is None
        assert self.controller.markers == [INITIAL_MARKER] * len(self.records)
        assert self.controller.tooltip.opacity == 0

    def test_enter_move_leave(self) -> None:
        self.controller.on_enter()
        assert self.controller.state is InteractionState.HOVERING
        assert self.controller.tooltip.opacity == 1

        self.controller.on_move(self.records[1], (100.0, 50.0))
        assert self.controller.tooltip.left == 190.0
        assert self.controller.tooltip.top == 50.0
        assert self.controller.tooltip.lines[0] == "Pollster: Elabe"

        self.controller.on_leave()
        assert self.controller.state is InteractionState.IDLE
        assert self.controller.tooltip.opacity == 0
        assert self.controller.tooltip.transition_ms == 200

    def test_move_ignored_when_idle(self) -> None:
        self.controller.on_move(self.records[1], (100.0, 50.0))
        assert self.controller.tooltip.lines == []

    def test_leave_without_selection_restores_default(self) -> None:
        self.controller.on_enter()
        self.controller.on_leave()
        for style in self.controller.markers:
            assert style == DEFAULT_MARKER
            assert style.fill == "#d8dee9"
            assert style.radius == 4
            assert style.opacity == 1

    def test_click_selects_pollster(self) -> None:
        self.controller.on_click(self.records[0])
        assert self.controller.selected_pollster == "IFOP"
        for record, style in zip(self.records, self.controller.markers):
            if record.pollster_id == "IFOP":
                assert style.radius == 4
                assert style.opacity == 1
                assert style.fill == "#2E3440"
            else:
                assert style.radius == 0

    def test_selection_survives_leave(self) -> None:
        self.controller.on_enter()
        self.controller.on_click(self.records[0])
        self.controller.on_leave()
        radii = [s.radius for s in self.controller.markers]
        assert radii == [4, 0, 4, 0]

    def test_click_never_deselects(self) -> None:
        self.controller.on_click(self.records[0])
        self.controller.on_click(self.records[2])
        assert self.controller.selected_pollster == "IFOP"

    def test_hidden_markers_ignore_events(self) -> None:
        self.controller.on_enter()
        self.controller.on_click(self.records[0])
        self.controller.on_move(self.records[0], (10.0, 10.0))
        assert self.controller.is_hidden(self.records[1])

        self.controller.on_move(self.records[1], (100.0, 50.0))
        self.controller.on_click(self.records[1])
        assert self.controller.tooltip.lines[0] == "Pollster: IFOP"
        assert self.controller.selected_pollster == "IFOP"

    def test_select_other_pollster_after_clear(self) -> None:
        self.controller.on_click(self.records[0])
        self.controller.clear_selection()
        self.controller.on_click(self.records[1])
        assert self.controller.selected_pollster == "Elabe"

    def test_clear_selection(self) -> None:
        self.controller.on_click(self.records[0])
        self.controller.clear_selection()
        assert self.controller.selected_pollster is None
        assert self.controller.markers == [DEFAULT_MARKER] * len(self.records)

    def test_state_round_trip_keeps_selection(self) -> None:
        self.controller.on_enter()
        self.controller.on_click(self.records[3])
        restored = ScatterInteractionController.from_state(
            self.records, self.controller.to_state()
        )
        assert restored.state is InteractionState.HOVERING
        assert restored.selected_pollster == "Harris Interactive"
        assert restored.markers == self.controller.markers


class TestLineInteractionController:
    def setup_method(self) -> None:
        self.x_scale, self.y_scale = build_scales(PLOT_WIDTH, PLOT_HEIGHT)
        self.records = make_predictions()
        self.controller = LineInteractionController(
            self.records, self.x_scale, self.y_scale, PLOT_HEIGHT
        )

    def test_enter_paints_last_record_by_default(self) -> None:
        self.controller.on_enter()
        annotation = self.controller.annotation
        assert annotation.opacity == 1
        assert self.controller.last_index == len(self.records) - 1
        assert annotation.headline == format_headline(self.records[-1])

    def test_move_positions_annotation(self) -> None:
        self.controller.on_enter()
        target = self.records[20]
        x = self.x_scale(target.date)
        self.controller.on_move(x - 0.5)

        annotation = self.controller.annotation
        assert self.controller.selected is target
        assert annotation.line_x == pytest.approx(x)
        assert annotation.headline_x == pytest.approx(x + 15)
        assert annotation.headline_y == pytest.approx(self.y_scale(target.mean_pct) - 25)
        assert annotation.date_x == pytest.approx(x)
        assert annotation.date_y == PLOT_HEIGHT
        assert annotation.date_label == lagged_display_month(target.date)

    def test_move_ignored_when_idle(self) -> None:
        self.controller.on_move(100)
        assert self.controller.last_index is None

    def test_hover_past_last_record(self) -> None:
        self.controller.on_enter()
        self.controller.on_move(PLOT_WIDTH)
        assert self.controller.selected is self.records[-1]

    def test_leave_fades_out(self) -> None:
        self.controller.on_enter()
        self.controller.on_leave()
        assert self.controller.state is InteractionState.IDLE
        assert self.controller.annotation.opacity == 0
        assert self.controller.annotation.transition_ms == 200

    def test_reenter_uses_last_known_record(self) -> None:
        self.controller.on_enter()
        self.controller.on_move(self.x_scale(self.records[5].date) - 0.5)
        self.controller.on_leave()
        self.controller.on_enter()
        assert self.controller.selected is self.records[5]

    def test_empty_series(self) -> None:
        controller = LineInteractionController([], self.x_scale, self.y_scale, PLOT_HEIGHT)
        controller.on_enter()
        controller.on_move(100)
        assert controller.selected is None


class TestChartComponents:
    def setup_method(self) -> None:
        self.charts = ChartComponents()
        self.x_scale, self.y_scale = build_scales(
            self.charts.plot_width, self.charts.plot_height
        )

    def test_plot_area(self) -> None:
        assert self.charts.plot_width == PLOT_WIDTH
        assert self.charts.plot_height == PLOT_HEIGHT

    def test_scatter_groups_by_pollster(self) -> None:
        records = make_polls()
        fig = self.charts.create_scatter_figure(records, ScatterInteractionController(records))
        names = [trace["name"] for trace in fig["data"]]
        assert names == ["IFOP", "Elabe", "Harris Interactive"]
        assert list(fig["data"][0]["customdata"]) == [0, 2]
        assert fig["data"][2]["uid"] == "dot-Harris-Interactive"
        assert list(fig["layout"]["yaxis"]["range"]) == [0, 100]
        assert list(fig["layout"]["xaxis"]["range"]) == ["2017-05-01", "2022-05-01"]

    def test_scatter_selected_sizes(self) -> None:
        records = make_polls()
        controller = ScatterInteractionController(records)
        controller.on_click(records[1])
        fig = self.charts.create_scatter_figure(records, controller)
        sizes = {t["name"]: list(t["marker"]["size"]) for t in fig["data"]}
        assert sizes == {"IFOP": [0, 0], "Elabe": [8], "Harris Interactive": [0]}
        assert fig["layout"]["transition"]["duration"] == 200

    def test_hidden_traces_skip_pointer_events(self) -> None:
        records = make_polls()
        controller = ScatterInteractionController(records)
        fig = self.charts.create_scatter_figure(records, controller)
        assert {t["hoverinfo"] for t in fig["data"]} == {"none"}

        controller.on_click(records[0])
        fig = self.charts.create_scatter_figure(records, controller)
        hoverinfo = {t["name"]: t["hoverinfo"] for t in fig["data"]}
        assert hoverinfo == {"IFOP": "none", "Elabe": "skip", "Harris Interactive": "skip"}

    def test_line_figure_traces(self) -> None:
        records = make_predictions()
        controller = LineInteractionController(records, self.x_scale, self.y_scale, PLOT_HEIGHT)
        fig = self.charts.create_line_figure(records, controller)
        names = [trace["name"] for trace in fig["data"]]
        assert names == ["hdi90-low", "hdi90", "hdi50-low", "hdi50", "mean", "sensing"]
        sensing = fig["data"][-1]
        assert list(sensing["customdata"])[-1] == PLOT_WIDTH
        assert fig["layout"]["annotations"][0]["opacity"] == 0

    def test_line_annotation_paper_coordinates(self) -> None:
        records = make_predictions()
        controller = LineInteractionController(records, self.x_scale, self.y_scale, PLOT_HEIGHT)
        controller.on_enter()
        fig = self.charts.create_line_figure(records, controller)
        shape = fig["layout"]["shapes"][0]
        expected = self.x_scale(records[-1].date) / PLOT_WIDTH
        assert shape["x0"] == pytest.approx(expected)
        assert fig["layout"]["annotations"][1]["text"] == lagged_display_month(records[-1].date)

    def test_blank_figure(self) -> None:
        fig = self.charts.create_blank_figure()
        assert fig["data"] == []
        assert list(fig["layout"]["yaxis"]["range"]) == [0, 100]


class TestCallbackHandler:
    def setup_method(self) -> None:
        self.charts = ChartComponents()
        x_scale, y_scale = build_scales(self.charts.plot_width, self.charts.plot_height)
        self.handler = CallbackHandler(self.charts, x_scale, y_scale)
        self.polls = make_polls()
        self.predictions = make_predictions()

    def hover(self, index: int, bbox=None) -> dict:
        point = {"curveNumber": 0, "pointIndex": 0, "customdata": index}
        if bbox:
            point["bbox"] = bbox
        return {"points": [point]}

    def test_hover_updates_tooltip_only(self) -> None:
        bbox = {"x0": 100, "x1": 110, "y0": 50, "y1": 60}
        figure, children, style, state = self.handler.handle_polls_event(
            self.polls, "hoverData", self.hover(1, bbox), None, None
        )
        assert figure is no_update
        assert children[0] == "Pollster: Elabe"
        assert style["left"] == "195.0px"
        assert style["top"] == "55.0px"
        assert style["opacity"] == 1
        assert state["state"] == "hovering"

    def test_pointer_fallback_without_bbox(self) -> None:
        record = self.polls[0]
        x, y = self.handler.pointer_position({}, record)
        assert x == pytest.approx(60 + self.handler.x_scale(record.field_date))
        assert y == pytest.approx(10 + self.handler.y_scale(record.approve_pct))

    def test_leave_restores_markers(self) -> None:
        _, _, _, state = self.handler.handle_polls_event(
            self.polls, "hoverData", self.hover(0), None, None
        )
        figure, _, style, state = self.handler.handle_polls_event(
            self.polls, "hoverData", None, None, state
        )
        assert style["opacity"] == 0
        assert style["transition"] == "opacity 200ms"
        colors = {c for t in figure["data"] for c in t["marker"]["color"]}
        assert colors == {"#d8dee9"}
        assert state["state"] == "idle"

    def test_click_then_leave_keeps_selection(self) -> None:
        _, _, _, state = self.handler.handle_polls_event(
            self.polls, "hoverData", self.hover(0), None, None
        )
        figure, _, _, state = self.handler.handle_polls_event(
            self.polls, "clickData", self.hover(0), self.hover(0), state
        )
        assert state["selected_pollster"] == "IFOP"
        sizes = {t["name"]: list(t["marker"]["size"]) for t in figure["data"]}
        assert sizes["IFOP"] == [8, 8]
        assert sizes["Elabe"] == [0]

        # 選取後的樣式不變，離開時不重繪
        figure, _, style, state = self.handler.handle_polls_event(
            self.polls, "hoverData", None, self.hover(0), state
        )
        assert figure is no_update
        assert style["opacity"] == 0
        assert state["selected_pollster"] == "IFOP"
        assert state["marker_mode"] == "selected"

    def test_clear_button(self) -> None:
        _, _, _, state = self.handler.handle_polls_event(
            self.polls, "clickData", None, self.hover(1), None
        )
        _, _, _, state = self.handler.handle_polls_event(
            self.polls, "n_clicks", None, self.hover(1), state
        )
        assert state["selected_pollster"] is None
        assert state["marker_mode"] == "default"

    def test_predictions_hover_last_pixel(self) -> None:
        hover = {"points": [{"curveNumber": 5, "customdata": PLOT_WIDTH, "x": "2022-05-01"}]}
        figure, state = self.handler.handle_predictions_event(self.predictions, hover, None)
        assert state == {"state": "hovering", "last_index": len(self.predictions) - 1}
        headline = figure["layout"]["annotations"][0]
        assert headline["text"] == format_headline(self.predictions[-1])
        assert headline["opacity"] == 1

    def test_predictions_leave(self) -> None:
        hover = {"points": [{"customdata": 100}]}
        _, state = self.handler.handle_predictions_event(self.predictions, hover, None)
        figure, state = self.handler.handle_predictions_event(self.predictions, None, state)
        assert state["state"] == "idle"
        assert figure["layout"]["annotations"][0]["opacity"] == 0

    def test_hover_on_hidden_pollster(self) -> None:
        _, _, _, state = self.handler.handle_polls_event(
            self.polls, "clickData", None, self.hover(0), None
        )
        figure, _, style, state = self.handler.handle_polls_event(
            self.polls, "hoverData", self.hover(1), self.hover(0), state
        )
        assert figure is no_update
        assert style["opacity"] == 0
        assert state["state"] == "idle"

        _, _, _, state = self.handler.handle_polls_event(
            self.polls, "clickData", self.hover(1), self.hover(1), state
        )
        assert state["selected_pollster"] == "IFOP"

    def test_point_index_built_once_per_dataset(self) -> None:
        original = PointIndex.__init__
        with patch.object(PointIndex, "__init__", autospec=True, side_effect=original) as init:
            state = None
            for px in (10, 200, 350, 500, 700):
                hover = {"points": [{"customdata": px}]}
                _, state = self.handler.handle_predictions_event(self.predictions, hover, state)
            assert init.call_count == 1

            other = make_predictions(count=10)
            self.handler.handle_predictions_event(other, {"points": [{"customdata": 5}]}, None)
            assert init.call_count == 2

    def test_pointer_x_uses_sensing_pixel(self) -> None:
        assert self.handler.pointer_x({"customdata": 355, "x": "2019-11-03"}) == 355.0

