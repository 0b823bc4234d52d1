"""Tests for PipelineExecutor: ordering, progress, partial failures, timeouts."""

from __future__ import annotations

import asyncio

import pytest

from fakes import HTML, JPEG, PNG, FakeHandler, fmt
from mimebridge.engine.executor import PipelineExecutor, step_progress
from mimebridge.engine.models import ConversionPath, ConversionStep
from mimebridge.errors import ConversionError, ConversionStepError
from mimebridge.formats.models import FileData


SVG_OUT = fmt("svg", "image/svg+xml", inp=False)


class SlowHandler(FakeHandler):
    async def convert(self, files, input_format, output_format):
        await asyncio.sleep(5)
        return files


@pytest.fixture
def html_files():
    return [FileData(name="page.html", data=b"<p>hi</p>")]


async def two_step_path(html_to_svg, svg_to_png) -> ConversionPath:
    await html_to_svg.initialize()
    await svg_to_png.initialize()
    svg = html_to_svg.find_format("image/svg+xml", "output")
    return ConversionPath((
        ConversionStep(html_to_svg, HTML, svg),
        ConversionStep(svg_to_png, svg, PNG),
    ))


def test_step_progress_spreads_over_execution_window():
    assert step_progress(0, 1) == 90
    assert [step_progress(i, 2) for i in range(2)] == [50, 90]
    assert [step_progress(i, 4) for i in range(4)] == [30, 50, 70, 90]


@pytest.mark.asyncio
async def test_steps_run_in_order_and_chain_outputs(html_to_svg, svg_to_png, html_files):
    path = await two_step_path(html_to_svg, svg_to_png)

    result = await PipelineExecutor().execute(path, html_files)

    assert result.success
    assert result.path == ["HTML", "SVG", "PNG"]
    assert result.files == [FileData(name="page.png", data=b"<p>hi</p>|svg|png")]
    # step 2 received step 1's output
    assert svg_to_png.calls[0][0] == [FileData(name="page.svg", data=b"<p>hi</p>|svg")]
    assert result.message == "Successfully converted to PNG"


@pytest.mark.asyncio
async def test_handler_called_with_its_own_descriptors():
    own_png = fmt("png", "image/png", internal="handler-private-png")
    own_jpeg = fmt("jpg", "image/jpeg", internal="handler-private-jpg")
    handler = FakeHandler("h", [own_png, own_jpeg])
    await handler.initialize()
    # Step carries catalog descriptors that differ from the handler's
    path = ConversionPath((ConversionStep(handler, PNG, JPEG),))

    result = await PipelineExecutor().execute(path, [FileData(name="a.png", data=b"x")])

    assert result.success
    _, used_in, used_out = handler.calls[0]
    assert used_in is own_png
    assert used_out is own_jpeg
    assert result.path == ["PNG", "JPEG"]


@pytest.mark.asyncio
async def test_progress_events(html_to_svg, svg_to_png, html_files, progress_events):
    events, sink = progress_events
    path = await two_step_path(html_to_svg, svg_to_png)

    await PipelineExecutor().execute(path, html_files, sink)

    assert [(e.stage, e.progress) for e in events] == [
        ("converting", 50),
        ("converting", 90),
        ("complete", 100),
    ]
    assert events[0].message == "Converting to SVG..."


@pytest.mark.asyncio
async def test_failure_at_step_two_reports_partial_path(html_files, progress_events):
    events, sink = progress_events
    first = FakeHandler("first", [fmt("html", "text/html", out=False), SVG_OUT])
    second = FakeHandler(
        "second",
        [fmt("svg", "image/svg+xml"), fmt("png", "image/png", inp=False)],
        convert_error=ConversionError("Failed to load SVG"),
    )
    path = await two_step_path(first, second)

    result = await PipelineExecutor().execute(path, html_files, sink)

    assert not result.success
    assert result.path == ["HTML", "SVG"]
    assert result.files is None
    assert "step 2" in result.message
    assert "Failed to load SVG" in result.message
    assert events[-1].stage == "error"


@pytest.mark.asyncio
async def test_failure_at_step_one(html_files):
    broken = FakeHandler("broken", [HTML, PNG], convert_error=RuntimeError("boom"))
    await broken.initialize()
    path = ConversionPath((ConversionStep(broken, HTML, PNG),))

    result = await PipelineExecutor().execute(path, html_files)

    assert result.path == ["HTML"]
    assert result.message == "Conversion failed at step 1: boom"


@pytest.mark.asyncio
async def test_format_resolution_failure_is_a_step_failure(html_files):
    handler = FakeHandler("h", [HTML, fmt("svg", "image/svg+xml")])
    await handler.initialize()
    # Handler never declared PNG output
    path = ConversionPath((ConversionStep(handler, HTML, PNG),))

    result = await PipelineExecutor().execute(path, html_files)

    assert not result.success
    assert "step 1" in result.message
    assert "image/png" in result.message
    assert handler.calls == []


@pytest.mark.asyncio
async def test_run_step_wraps_errors_with_cause():
    handler = FakeHandler("h", [PNG, JPEG], convert_error=ValueError("bad bytes"))
    await handler.initialize()

    with pytest.raises(ConversionStepError) as exc_info:
        await PipelineExecutor().run_step(ConversionStep(handler, PNG, JPEG), [], 3)

    assert exc_info.value.step == 3
    assert exc_info.value.handler == "h"
    assert isinstance(exc_info.value.__cause__, ValueError)


@pytest.mark.asyncio
async def test_step_timeout():
    slow = SlowHandler("slow", [PNG, JPEG])
    await slow.initialize()
    path = ConversionPath((ConversionStep(slow, PNG, JPEG),))

    result = await PipelineExecutor(step_timeout=0.01).execute(path, [FileData(name="a.png", data=b"x")])

    assert not result.success
    assert "timed out" in result.message
    assert result.path == ["PNG"]


@pytest.mark.asyncio
async def test_inputs_are_not_mutated(html_to_svg, svg_to_png, html_files):
    original = list(html_files)
    path = await two_step_path(html_to_svg, svg_to_png)

    await PipelineExecutor().execute(path, html_files)

    assert html_files == original
    assert html_files[0].data == b"<p>hi</p>"
