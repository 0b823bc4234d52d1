"""End-to-end conversion requests through the Converter facade."""

from __future__ import annotations

import io

import pytest

from fakes import HTML, JPEG, MP3, PDF, PNG, SVG, FakeHandler, fmt
from mimebridge.config.models import EngineConfig
from mimebridge.engine.converter import Converter
from mimebridge.engine.registry import HandlerRegistry
from mimebridge.errors import ConversionError
from mimebridge.formats.models import FileData


def make_converter(*handlers, **engine) -> Converter:
    return Converter(HandlerRegistry(handlers), EngineConfig(**engine))


@pytest.mark.asyncio
async def test_identity_conversion_skips_handlers(raster_like, sample_files, progress_events):
    events, sink = progress_events
    converter = make_converter(raster_like)

    result = await converter.convert(sample_files, PNG, PNG, sink)

    assert result.success
    assert result.message == "Files are already in the target format."
    assert result.path == ["PNG"]
    assert result.files == sample_files
    assert raster_like.calls == []
    assert events[-1].stage == "complete"
    assert events[-1].progress == 100


@pytest.mark.asyncio
async def test_identity_uses_canonical_mime(raster_like, sample_files):
    jpg_alias = fmt("jpg", "Image/JPEG; q=0.9")
    converter = make_converter(raster_like)

    result = await converter.convert(sample_files, JPEG, jpg_alias)

    assert result.success
    assert result.path == ["JPEG"]
    assert raster_like.calls == []


@pytest.mark.asyncio
async def test_png_to_jpeg_single_step(raster_like, sample_files, progress_events):
    events, sink = progress_events
    converter = make_converter(raster_like)

    result = await converter.convert(sample_files, PNG, JPEG, sink)

    assert result.success
    assert result.path == ["PNG", "JPEG"]
    assert result.message == "Successfully converted to JPEG"
    assert [f.name for f in result.files] == ["photo.jpg"]

    converting = [e for e in events if e.stage == "converting"]
    assert [e.progress for e in converting] == [0, 10, 90]
    assert converting[0].message == "Finding conversion route..."
    assert converting[1].message == "Converting: JPEG"
    assert events[-1].stage == "complete"


@pytest.mark.asyncio
async def test_html_to_png_bridges_through_svg(html_to_svg, svg_to_png, progress_events):
    events, sink = progress_events
    converter = make_converter(html_to_svg, svg_to_png)
    files = [FileData(name="index.html", data=b"<h1>Hi</h1>")]

    result = await converter.convert(files, HTML, PNG, sink)

    assert result.success
    assert result.path == ["HTML", "SVG", "PNG"]
    assert result.files[0].name == "index.png"
    assert any(e.message == "Converting: SVG → PNG" for e in events)


@pytest.mark.asyncio
async def test_no_route_is_a_failed_result(raster_like, progress_events):
    events, sink = progress_events
    converter = make_converter(raster_like)
    files = [FileData(name="doc.pdf", data=b"%PDF")]

    result = await converter.convert(files, PDF, MP3, sink)

    assert not result.success
    assert result.path is None
    assert result.files is None
    assert "No conversion path found from PDF to MP3" in result.message
    assert events[-1].stage == "error"
    assert raster_like.calls == []


@pytest.mark.asyncio
async def test_max_hops_from_engine_config(html_to_svg, svg_to_png):
    converter = make_converter(html_to_svg, svg_to_png, max_hops=1)

    result = await converter.convert([FileData(name="a.html", data=b"")], HTML, PNG)

    assert not result.success
    assert result.path is None


@pytest.mark.asyncio
async def test_find_route_override(html_to_svg, svg_to_png):
    converter = make_converter(html_to_svg, svg_to_png, max_hops=1)
    await converter.initialize()

    assert converter.find_route(HTML, PNG) is None
    route = converter.find_route(HTML, PNG, max_hops=2)
    assert route.labels == ["HTML", "SVG", "PNG"]


@pytest.mark.asyncio
async def test_initializes_lazily_once(raster_like, sample_files, progress_events):
    events, sink = progress_events
    converter = make_converter(raster_like)
    assert not converter.registry.is_initialized

    await converter.convert(sample_files, PNG, JPEG, sink)
    await converter.convert(sample_files, PNG, JPEG)

    assert raster_like.init_calls == 1
    assert events[0].stage == "initializing"


@pytest.mark.asyncio
async def test_step_failure_leaves_converter_usable(sample_files):
    flaky = FakeHandler("flaky", [PNG, JPEG], convert_error=ConversionError("corrupt input"))
    good = FakeHandler("good", [SVG, fmt("png", "image/png", inp=False)])
    converter = make_converter(flaky, good)

    failed = await converter.convert(sample_files, PNG, JPEG)
    assert not failed.success
    assert failed.path == ["PNG"]
    assert "corrupt input" in failed.message

    ok = await converter.convert([FileData(name="a.svg", data=b"<svg/>")], SVG, PNG)
    assert ok.success
    assert ok.path == ["SVG", "PNG"]


@pytest.mark.asyncio
async def test_failed_handler_never_routes(sample_files):
    broken = FakeHandler("broken", [PNG, JPEG], init_error=RuntimeError("missing codec"))
    converter = make_converter(broken)

    result = await converter.convert(sample_files, PNG, JPEG)

    assert not result.success
    assert result.path is None
    assert broken.calls == []
    assert "broken" in converter.registry.failures


@pytest.mark.asyncio
async def test_real_raster_png_to_jpeg():
    Image = pytest.importorskip("PIL.Image")
    from mimebridge.handlers.raster import RasterHandler

    buf = io.BytesIO()
    Image.new("RGBA", (4, 4), (255, 0, 0, 128)).save(buf, format="PNG")
    converter = make_converter(RasterHandler())
    await converter.initialize()
    png = converter.catalog.find_by_mime("image/png")
    jpeg = converter.catalog.find_by_mime("image/jpeg")

    result = await converter.convert([FileData(name="dot.png", data=buf.getvalue())], png, jpeg)

    assert result.success
    assert result.path == ["PNG", "JPEG"]
    out = result.files[0]
    assert out.name == "dot.jpg"
    assert Image.open(io.BytesIO(out.data)).format == "JPEG"
