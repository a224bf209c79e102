"""
Markup for social-preview images.

The markup is handed to an external HTML -> PNG renderer. Anything taken
from a record is escaped here before it is embedded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from atmopics.core.blobs import blob_url
from atmopics.core.dto.blob import AspectRatio, BlobReference, BlobVariant
from atmopics.core.dto.record import CodeRecord, MarkdownRecord
from atmopics.core.layout import fit_layout

OG_WIDTH = 1200
OG_HEIGHT = 630

CODE_PREVIEW_CHARS = 400
MARKDOWN_PREVIEW_CHARS = 300


@dataclass(frozen=True)
class PreviewCard:
    markup: str
    width: int = OG_WIDTH
    height: int = OG_HEIGHT


class PreviewRenderer(Protocol):
    """External rasterizer: markup in, PNG bytes out."""

    def render(self, markup: str, *, width: int, height: int) -> bytes:
        ...


def escape_markup(text: str) -> str:
    # ampersand first so already-produced entities are not double-escaped
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def truncate(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def code_card(record: CodeRecord) -> PreviewCard:
    title = escape_markup(record.title or "Code snippet")
    preview = escape_markup(truncate(record.content or "", CODE_PREVIEW_CHARS))
    markup = (
        f'<div style="display:flex;flex-direction:column;justify-content:center;padding:48px;'
        f'width:{OG_WIDTH}px;height:{OG_HEIGHT}px;background:#1e1e2e;color:#cdd6f4;font-family:monospace;">\n'
        f'  <div style="font-size:36px;font-weight:bold;margin-bottom:24px;color:#89b4fa;overflow:hidden;'
        f'text-overflow:ellipsis;white-space:nowrap;">{title}</div>\n'
        f'  <div style="font-size:20px;color:#a6adc8;overflow:hidden;display:-webkit-box;-webkit-line-clamp:10;'
        f'-webkit-box-orient:vertical;white-space:pre-wrap;">{preview}</div>\n'
        f'</div>'
    )
    return PreviewCard(markup)


def markdown_card(record: MarkdownRecord) -> PreviewCard:
    title = escape_markup(record.title or "Markdown post")
    preview = escape_markup(truncate(record.content or "", MARKDOWN_PREVIEW_CHARS))
    markup = (
        f'<div style="display:flex;flex-direction:column;justify-content:center;padding:60px;'
        f'width:{OG_WIDTH}px;height:{OG_HEIGHT}px;background:#111;color:#fff;font-family:sans-serif;">\n'
        f'  <div style="font-size:48px;font-weight:bold;margin-bottom:24px;overflow:hidden;'
        f'text-overflow:ellipsis;white-space:nowrap;">{title}</div>\n'
        f'  <div style="font-size:24px;color:#aaa;overflow:hidden;display:-webkit-box;-webkit-line-clamp:6;'
        f'-webkit-box-orient:vertical;">{preview}</div>\n'
        f'</div>'
    )
    return PreviewCard(markup)


def media_card(
    did: str,
    blob: BlobReference,
    aspect: AspectRatio,
    *,
    cdn_url: Optional[str] = None,
) -> PreviewCard:
    """Center a CDN-transcoded still on a black canvas, letterboxed to fit."""
    layout = fit_layout(aspect, (OG_WIDTH, OG_HEIGHT))
    kwargs = {"cdn_url": cdn_url} if cdn_url else {}
    src = escape_markup(blob_url(did, blob, BlobVariant.CDN_JPEG, **kwargs)).replace('"', "&quot;")
    markup = (
        f'<div style="display:flex;align-items:center;justify-content:center;'
        f'width:{OG_WIDTH}px;height:{OG_HEIGHT}px;background:#000;">\n'
        f'  <img src="{src}" width="{layout.width}" height="{layout.height}" />\n'
        f'</div>'
    )
    return PreviewCard(markup)
