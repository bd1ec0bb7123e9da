"""Deterministic placeholder graphics."""

import base64
from html import escape

_SVG_TEMPLATE = """<svg xmlns='http://www.w3.org/2000/svg' width='1024' height='576'>
  <defs>
    <linearGradient id='g' x1='0' x2='1' y1='0' y2='1'>
      <stop stop-color='#eef2ff' offset='0'/>
      <stop stop-color='#e2e8f0' offset='1'/>
    </linearGradient>
  </defs>
  <rect fill='url(#g)' width='100%' height='100%'/>
  <text x='50%' y='50%' dominant-baseline='middle' text-anchor='middle'
        font-family='system-ui,Arial' font-size='36' fill='#334155'>{title}</text>
</svg>"""


def placeholder_svg(title: str | None, max_chars: int = 60) -> str:
    """Render a gradient card showing ``title`` as a base64 SVG data URI.

    The title is capped at ``max_chars`` characters before escaping.
    """
    text = escape((title or "Noticia")[:max_chars], quote=True)
    svg = _SVG_TEMPLATE.format(title=text)
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"
