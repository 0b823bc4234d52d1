"""HTML to SVG by embedding the markup in a foreignObject."""

from __future__ import annotations

from html import escape
from html.parser import HTMLParser

from mimebridge.config.models import HtmlConfig
from mimebridge.errors import ConversionError
from mimebridge.formats.mime import with_extension
from mimebridge.formats.models import FileData, FormatDescriptor
from mimebridge.handlers.base import FormatHandler

HTML_FORMATS: tuple[FormatDescriptor, ...] = (
    FormatDescriptor(
        name="Hypertext Markup Language", format="html", extension="html", mime="text/html",
        supports_input=True, internal="html", category="document",
    ),
    FormatDescriptor(
        name="Scalable Vector Graphics", format="svg", extension="svg", mime="image/svg+xml",
        supports_output=True, internal="svg", category="image",
    ),
)

_VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}
_SKIPPED_CONTENT = {"script", "title"}
_DROPPED_TAGS = _SKIPPED_CONTENT | {"html", "head", "body"}


class _XhtmlWriter(HTMLParser):
    """Re-serializes loose HTML as well-formed XHTML."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []
        self._open: list[str] = []
        self._skip = 0

    def handle_starttag(self, tag, attrs):
        if tag in _SKIPPED_CONTENT:
            self._skip += 1
        if tag in _DROPPED_TAGS:
            return
        rendered = "".join(f' {k}="{escape(v or "", quote=True)}"' for k, v in attrs)
        if tag in _VOID_TAGS:
            self.parts.append(f"<{tag}{rendered}/>")
            return
        self.parts.append(f"<{tag}{rendered}>")
        self._open.append(tag)

    def handle_startendtag(self, tag, attrs):
        if tag in _DROPPED_TAGS:
            return
        rendered = "".join(f' {k}="{escape(v or "", quote=True)}"' for k, v in attrs)
        self.parts.append(f"<{tag}{rendered}/>")

    def handle_endtag(self, tag):
        if tag in _SKIPPED_CONTENT:
            self._skip = max(self._skip - 1, 0)
        if tag not in self._open:
            return
        # Close anything left open inside this element.
        while self._open:
            top = self._open.pop()
            self.parts.append(f"</{top}>")
            if top == tag:
                break

    def handle_data(self, data):
        if not self._skip:
            self.parts.append(escape(data, quote=False))

    def result(self) -> str:
        self.close()
        while self._open:
            self.parts.append(f"</{self._open.pop()}>")
        return "".join(self.parts)


def html_to_xhtml(markup: str) -> str:
    writer = _XhtmlWriter()
    writer.feed(markup)
    return writer.result()


class HtmlHandler(FormatHandler):
    name = "html"

    def __init__(self, config: HtmlConfig | None = None) -> None:
        super().__init__()
        self._config = config or HtmlConfig()

    async def initialize(self) -> None:
        self._declare(HTML_FORMATS)

    async def convert(
        self,
        files: list[FileData],
        input_format: FormatDescriptor,
        output_format: FormatDescriptor,
    ) -> list[FileData]:
        if input_format.internal != "html" or output_format.internal != "svg":
            raise ConversionError(
                f"Unsupported conversion: {input_format.format} to {output_format.format}"
            )
        w, h = self._config.width, self._config.height
        out = []
        for f in files:
            body = html_to_xhtml(f.data.decode("utf-8", errors="replace"))
            svg = (
                f'<svg width="{w}" height="{h}" xmlns="http://www.w3.org/2000/svg">\n'
                f'<foreignObject x="0" y="0" width="{w}" height="{h}">\n'
                f'<div xmlns="http://www.w3.org/1999/xhtml">{body}</div>\n'
                "</foreignObject>\n"
                "</svg>"
            )
            out.append(FileData(name=with_extension(f.name, "svg"), data=svg.encode("utf-8")))
        return out
