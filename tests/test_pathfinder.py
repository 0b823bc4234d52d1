"""Tests for route discovery: direct routes, BFS, hop bounds, tie-breaks."""

from __future__ import annotations

import pytest

from fakes import HTML, JPEG, MP3, PDF, PNG, FakeHandler, fmt
from mimebridge.formats.models import FormatDescriptor
from mimebridge.engine.models import ConversionPath
from mimebridge.engine.pathfinder import find_bridge, find_path, require_path
from mimebridge.errors import NoRouteError


A = fmt("a", "x-test/a")
B = fmt("b", "x-test/b")
C = fmt("c", "x-test/c")
D = fmt("d", "x-test/d")
E = fmt("e", "x-test/e")


def edge(name: str, src: FormatDescriptor, dst: FormatDescriptor) -> FakeHandler:
    """Handler for exactly one directed edge src -> dst."""
    return FakeHandler(
        name,
        [src.model_copy(update={"supports_output": False}), dst.model_copy(update={"supports_input": False})],
    )


async def init_all(*handlers: FakeHandler) -> list[FakeHandler]:
    for h in handlers:
        await h.initialize()
    return list(handlers)


# ── direct routes ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_direct_route_single_step(raster_like):
    handlers = await init_all(raster_like)

    path = find_path(handlers, PNG, JPEG)

    assert len(path) == 1
    step = path.steps[0]
    assert step.handler is raster_like
    assert path.labels == ["PNG", "JPEG"]


@pytest.mark.asyncio
@pytest.mark.parametrize("max_hops", [0, 1, 3, 10])
async def test_direct_route_ignores_hop_bound(raster_like, max_hops):
    handlers = await init_all(raster_like)
    path = find_path(handlers, PNG, JPEG, max_hops)
    assert path is not None and len(path) == 1


@pytest.mark.asyncio
async def test_direct_route_prefers_first_registered():
    first = FakeHandler("first", [PNG, JPEG])
    second = FakeHandler("second", [PNG, JPEG])
    handlers = await init_all(first, second)

    assert find_path(handlers, PNG, JPEG).steps[0].handler is first


@pytest.mark.asyncio
async def test_output_only_entry_is_not_an_input():
    # Handler writes PNG but cannot read it
    handler = FakeHandler("h", [fmt("png", "image/png", inp=False), JPEG])
    handlers = await init_all(handler)

    assert find_bridge(handlers, PNG, JPEG) is None
    assert find_bridge(handlers, JPEG, PNG) is not None


@pytest.mark.asyncio
async def test_not_ready_handler_is_skipped():
    handler = FakeHandler("h", [PNG, JPEG])
    await handler.initialize()
    handler.ready = False

    assert find_path([handler], PNG, JPEG) is None


@pytest.mark.asyncio
async def test_mime_aliases_match():
    handler = FakeHandler("audio", [fmt("wav", "audio/x-wav"), MP3])
    handlers = await init_all(handler)

    path = find_path(handlers, fmt("wav", "audio/wav"), MP3)
    assert path is not None


# ── multi-hop routes ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_two_step_route_through_svg(html_to_svg, svg_to_png):
    handlers = await init_all(html_to_svg, svg_to_png)

    path = find_path(handlers, HTML, PNG)

    assert path.labels == ["HTML", "SVG", "PNG"]
    assert [s.handler.name for s in path.steps] == ["html", "svg"]


@pytest.mark.asyncio
async def test_shortest_path_returned():
    # A->B->C->D (3 hops) and A->E->D (2 hops)
    handlers = await init_all(
        edge("ab", A, B), edge("bc", B, C), edge("cd", C, D),
        edge("ae", A, E), edge("ed", E, D),
    )

    path = find_path(handlers, A, D, max_hops=5)

    assert path.labels == ["A", "E", "D"]


@pytest.mark.asyncio
async def test_path_length_k_needs_max_hops_k():
    handlers = await init_all(edge("ab", A, B), edge("bc", B, C), edge("cd", C, D))

    assert find_path(handlers, A, D, max_hops=2) is None
    path = find_path(handlers, A, D, max_hops=3)
    assert len(path) == 3
    assert path.labels == ["A", "B", "C", "D"]
    assert len(find_path(handlers, A, D, max_hops=7)) == 3


@pytest.mark.asyncio
async def test_max_hops_one_disables_search(html_to_svg, svg_to_png):
    handlers = await init_all(html_to_svg, svg_to_png)
    assert find_path(handlers, HTML, PNG, max_hops=1) is None


@pytest.mark.asyncio
async def test_cycle_terminates():
    # A <-> B cycle, destination unreachable
    handlers = await init_all(edge("ab", A, B), edge("ba", B, A), edge("bc", B, C), edge("cb", C, B))

    assert find_path(handlers, A, D, max_hops=50) is None


@pytest.mark.asyncio
async def test_bfs_tie_break_first_registered():
    # Two handlers can carry A -> B; the first registered is used
    first = edge("first", A, B)
    second = edge("second", A, B)
    handlers = await init_all(first, second, edge("bc", B, C))

    path = find_path(handlers, A, C)

    assert path.steps[0].handler is first


@pytest.mark.asyncio
async def test_bfs_tie_break_first_enqueued_intermediate():
    # A -> B -> D and A -> C -> D both have length 2; B is declared first
    handlers = await init_all(
        FakeHandler("fan-out", [A.model_copy(update={"supports_output": False}), B, C]),
        edge("cd", C, D),
        edge("bd", B, D),
    )

    path = find_path(handlers, A, D)

    assert path.labels == ["A", "B", "D"]
    assert path.steps[1].handler.name == "bd"


@pytest.mark.asyncio
async def test_route_is_deterministic(html_to_svg, svg_to_png):
    handlers = await init_all(html_to_svg, svg_to_png)
    first = find_path(handlers, HTML, PNG)
    second = find_path(handlers, HTML, PNG)
    assert first == second


@pytest.mark.asyncio
async def test_no_route(raster_like):
    handlers = await init_all(raster_like)
    assert find_path(handlers, PDF, MP3) is None


@pytest.mark.asyncio
async def test_require_path_raises(raster_like):
    handlers = await init_all(raster_like)
    with pytest.raises(NoRouteError) as exc_info:
        require_path(handlers, PDF, MP3)
    assert exc_info.value.source == "PDF"
    assert exc_info.value.destination == "MP3"
    assert "No conversion path found from PDF to MP3" in str(exc_info.value)


def test_conversion_path_requires_steps():
    with pytest.raises(ValueError):
        ConversionPath(())
