"""Tests for the tracer module."""

import json
import os
import threading

import numpy as np
import pytest


class TestSummarize:
    """Tests for object summarization."""

    def test_numpy_array_summary(self):
        """Test that numpy arrays are summarized with shape and type."""
        from sketchfit.tracer import summarize

        arr = np.zeros((100, 2), dtype=np.float64)
        summary = summarize(arr)

        assert "ndarray" in summary
        assert "100x2" in summary
        assert "float64" in summary

    def test_summary_capped_length(self):
        """Test that summary never exceeds max length."""
        from sketchfit.tracer import summarize

        large_dict = {f"key_{i}": f"value_{i}" for i in range(100)}
        summary = summarize(large_dict, max_len=20)

        assert len(summary) <= 20

    def test_list_summary(self):
        """Test list summarization."""
        from sketchfit.tracer import summarize

        summary = summarize([1, 2, 3, 4, 5])

        assert "list" in summary
        assert "len=5" in summary

    def test_string_summary(self):
        """Test long string summarization."""
        from sketchfit.tracer import summarize

        summary = summarize("a" * 1000)

        assert "str" in summary
        assert "len=1000" in summary
        assert len(summary) <= 200

    def test_none_summary(self):
        """Test None summarization."""
        from sketchfit.tracer import summarize

        assert summarize(None) == "None"

    def test_curve_summary(self):
        """Test that primitives show their type and parameters."""
        from sketchfit.primitives.curves import Arc
        from sketchfit.tracer import summarize

        summary = summarize(Arc([0.0, 0.0, 0.0, 5.0, 0.25]))

        assert summary.startswith("Arc(")
        assert "0.25" in summary

    def test_polyline_summary(self, straight_points):
        """Test that polylines show size and topology."""
        from sketchfit.geometry.polyline import Polyline
        from sketchfit.tracer import summarize

        assert summarize(Polyline(straight_points)) == "Polyline(size=5,closed=False)"

    def test_pydantic_model_summary(self):
        """Test Pydantic model summarization."""
        from sketchfit.models import StrokeMeta
        from sketchfit.tracer import summarize

        summary = summarize(StrokeMeta(num_input_points=3, num_samples=3))

        assert "StrokeMeta" in summary


class TestTracerSpan:
    """Tests for tracer span functionality."""

    def test_span_nesting(self, capsys):
        """Test that spans produce proper indentation."""
        from sketchfit.tracer import configure_tracer, get_tracer

        configure_tracer(enabled=True, level="INFO")
        tracer = get_tracer()

        try:
            with tracer.span("outer", module="test"):
                with tracer.span("inner", module="test"):
                    tracer.event("inside")
        finally:
            configure_tracer(enabled=False)

        lines = capsys.readouterr().err.strip().split("\n")
        assert len(lines) == 5
        assert "    test:inner  inside" in lines[2]

    def test_tracer_disabled_no_output(self, capsys):
        """Test that disabled tracer produces no output."""
        from sketchfit.tracer import configure_tracer, get_tracer

        configure_tracer(enabled=False)
        tracer = get_tracer()

        with tracer.span("test", module="test"):
            tracer.event("should not appear")

        assert capsys.readouterr().err == ""

    def test_level_filter(self, capsys):
        """Test that DEBUG events are hidden at INFO level."""
        from sketchfit.tracer import configure_tracer, get_tracer

        configure_tracer(enabled=True, level="INFO")
        try:
            get_tracer().event("hidden", level="DEBUG")
            get_tracer().event("shown", level="WARN")
        finally:
            configure_tracer(enabled=False)

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_json_output_to_file(self, temp_dir, capsys):
        """Test that JSON records reach the trace file."""
        from sketchfit.tracer import configure_tracer, get_tracer

        path = os.path.join(temp_dir, "trace.log")
        configure_tracer(enabled=True, file_path=path, json_output=True)
        try:
            get_tracer().event("counted", candidates=3)
        finally:
            configure_tracer(enabled=False)

        with open(path, encoding="utf-8") as f:
            lines = f.read().strip().split("\n")
        record = json.loads(lines[-1])
        assert record["message"] == "counted candidates=3"
        assert record["meta"] == {"candidates": "3"}
        assert record["thread"] == threading.current_thread().name

    def test_depth_is_per_thread(self):
        """Test that a span in one thread does not indent another."""
        from sketchfit.tracer import configure_tracer, get_tracer

        configure_tracer(enabled=True, level="ERROR")
        tracer = get_tracer()
        seen = []
        try:
            with tracer.span("outer", module="test"):
                worker = threading.Thread(target=lambda: seen.append(tracer._depth))
                worker.start()
                worker.join()
                seen.append(tracer._depth)
        finally:
            configure_tracer(enabled=False)

        assert seen == [0, 1]


class TestTraceDecorator:
    """Tests for the @trace decorator."""

    def test_decorator_runs_function(self):
        """Test that decorated function executes normally."""
        from sketchfit.tracer import configure_tracer, trace

        configure_tracer(enabled=False)

        @trace(label="test_func")
        def my_func(x):
            return x * 2

        assert my_func(5) == 10

    def test_decorator_with_exception(self, capsys):
        """Test that the decorator logs failures and re-raises."""
        from sketchfit.tracer import configure_tracer, trace

        configure_tracer(enabled=True)

        @trace(label="failing_func")
        def failing_func():
            raise ValueError("test error")

        try:
            with pytest.raises(ValueError):
                failing_func()
        finally:
            configure_tracer(enabled=False)

        assert "failed" in capsys.readouterr().err
