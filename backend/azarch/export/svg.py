from collections import defaultdict
from html import escape
from typing import Dict, List, Optional

from azarch.export.drawio import page_size, truncate_label
from azarch.export.styles import color_for, edge_color_for
from azarch.model.geometry import absolute_bounds
from azarch.model.types import ArchitectureModel, ArchNode, EdgeStyle
from azarch.schemas import ExportOptions


def to_svg(model: ArchitectureModel, options: Optional[ExportOptions] = None) -> str:
    opts = options or ExportOptions()
    placed = absolute_bounds(model)
    lookup = model.node_map()
    w, h = page_size(model)

    svg = [
        f'<svg width="{w}" height="{h}" xmlns="http://www.w3.org/2000/svg">',
        f"<title>{escape(opts.diagram_name)}</title>",
    ]

    # Draw edges first
    for e in model.edges:
        if e.is_containment or e.source not in placed or e.target not in placed:
            continue
        src = placed[e.source]
        dst = placed[e.target]
        dash = ' stroke-dasharray="6 4"' if e.style != EdgeStyle.SOLID else ""
        svg.append(
            f'<line x1="{src.x + src.w / 2}" y1="{src.y + src.h / 2}" '
            f'x2="{dst.x + dst.w / 2}" y2="{dst.y + dst.h / 2}" '
            f'stroke="{edge_color_for(e)}" stroke-width="2"{dash}/>'
        )

    children: Dict[str, List[ArchNode]] = defaultdict(list)
    roots: List[ArchNode] = []
    for n in lookup.values():
        if n.parent_id and n.parent_id in lookup:
            children[n.parent_id].append(n)
        else:
            roots.append(n)

    drawn = set()

    def draw(n: ArchNode) -> None:
        if n.id in drawn:
            return
        drawn.add(n.id)
        b = placed.get(n.id)
        svg.append(f'<g id="{escape(n.id)}">')
        if b is not None:
            kids = children.get(n.id, [])
            color = color_for(n)
            if kids or n.is_container:
                svg.append(
                    f'<rect x="{b.x}" y="{b.y}" width="{b.w}" height="{b.h}" '
                    f'rx="6" ry="6" fill="{color}" fill-opacity="0.08" stroke="{color}"/>'
                )
                text_y = b.y + 18
            else:
                svg.append(
                    f'<rect x="{b.x}" y="{b.y}" width="{b.w}" height="{b.h}" '
                    f'rx="8" ry="8" fill="#FFFFFF" stroke="{color}" stroke-width="2"/>'
                )
                text_y = b.y + b.h / 2
            svg.append(
                f'<text x="{b.x + b.w / 2}" y="{text_y}" '
                f'text-anchor="middle" dominant-baseline="middle" '
                f'font-family="Arial" font-size="12">'
                f"{escape(truncate_label(n.label, opts.max_label_length))}</text>"
            )
        for kid in children.get(n.id, []):
            draw(kid)
        svg.append("</g>")

    for n in roots:
        draw(n)

    svg.append("</svg>")
    return "\n".join(svg)
