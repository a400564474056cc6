"""HTML gallery generator — produces an index page for the overlays written to the output directory."""

from __future__ import annotations

import html
import logging
from pathlib import Path
from urllib.parse import quote

from snapdiff.models.snapshot import ComparisonOutcome, DiffResult

logger = logging.getLogger(__name__)


def _overlay_src(outcome: ComparisonOutcome, output_dir: Path) -> str:
    """Overlay path relative to the gallery page, or empty string when there is none."""
    if not outcome.diff_path:
        return ""
    try:
        return quote(Path(outcome.diff_path).resolve().relative_to(output_dir.resolve()).as_posix())
    except ValueError:
        return Path(outcome.diff_path).resolve().as_uri()


def _build_changed_card(outcome: ComparisonOutcome, output_dir: Path) -> str:
    name = html.escape(outcome.name)
    if outcome.comparison_failed:
        reason = html.escape(outcome.error or "comparison failed")
        return f'''
    <div class="snapshot-card failed">
      <div class="snapshot-header"><span class="badge failed">COMPARISON FAILED</span> <strong>{name}</strong></div>
      <div class="failure-banner">Result indeterminate: {reason}</div>
    </div>'''

    src = html.escape(_overlay_src(outcome, output_dir))
    meta = ""
    if outcome.mismatch_count is not None and outcome.total_pixels:
        ratio = outcome.mismatch_count / outcome.total_pixels
        meta = f'{outcome.mismatch_count} px ({ratio:.2%})'
    if outcome.compared_against == "merge_base":
        meta += " &middot; vs merge base"
    if (outcome.current_width, outcome.current_height) != (outcome.base_width, outcome.base_height):
        meta += (f" &middot; {outcome.base_width}&times;{outcome.base_height} &rarr; "
                 f"{outcome.current_width}&times;{outcome.current_height}")

    return f'''
    <div class="snapshot-card">
      <div class="snapshot-header"><span class="badge changed">CHANGED</span> <strong>{name}</strong>
        <span class="snapshot-meta">{meta}</span></div>
      <img src="{src}" alt="{name}" loading="lazy" onclick="this.classList.toggle('zoomed')"/>
    </div>'''


def _build_name_list(title: str, css_class: str, names: set[str]) -> str:
    if not names:
        return ""
    items = "".join(f"<li>{html.escape(n)}</li>" for n in sorted(names))
    return f'<div class="section {css_class}"><h2>{title} ({len(names)})</h2><ul>{items}</ul></div>'


def generate_image_gallery(result: DiffResult, output_path: Path, title: str = "Visual Snapshots") -> None:
    """Write a self-contained gallery page summarizing the diff result."""
    output_dir = output_path.parent
    changed = [o for o in result.outcomes if o.status == "changed"]
    # Largest diffs first, failed comparisons last
    changed.sort(key=lambda o: (o.comparison_failed, -(o.mismatch_count or 0), o.name))
    cards = [_build_changed_card(o, output_dir) for o in changed]

    changed_section = ""
    if cards:
        changed_section = (f'<div class="section"><h2>Changed ({len(cards)})</h2>'
                           f'<div class="gallery">{"".join(cards)}</div></div>')

    page = f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{html.escape(title)}</title>
<style>
  :root {{ --changed: #ef4444; --added: #22c55e; --missing: #eab308; --failed: #f97316; --bg: #f8fafc; --card: white; --border: #e2e8f0; --text: #1e293b; --muted: #64748b; }}
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: var(--bg); color: var(--text); line-height: 1.6; padding: 1.5rem; }}
  .container {{ max-width: 1400px; margin: 0 auto; }}
  h1 {{ font-size: 1.8rem; margin-bottom: 1rem; }}
  h2 {{ font-size: 1rem; margin-bottom: 0.5rem; }}
  .summary {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(130px, 1fr)); gap: 0.8rem; margin-bottom: 1.5rem; }}
  .stat {{ background: var(--card); border-radius: 8px; padding: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); text-align: center; }}
  .stat .value {{ font-size: 1.8rem; font-weight: 700; }}
  .stat .label {{ font-size: 0.8rem; color: var(--muted); }}
  .stat.changed .value {{ color: var(--changed); }}
  .stat.added .value {{ color: var(--added); }}
  .stat.missing .value {{ color: var(--missing); }}
  .stat.failed .value {{ color: var(--failed); }}
  .badge {{ display: inline-block; padding: 0.15rem 0.55rem; border-radius: 9999px; font-size: 0.7rem; font-weight: 600; white-space: nowrap; }}
  .badge.changed {{ background: #fecaca; color: #991b1b; }}
  .badge.failed {{ background: #fed7aa; color: #9a3412; }}
  .section {{ background: var(--card); border-radius: 8px; padding: 1.2rem; margin-bottom: 1.5rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); }}
  .section ul {{ margin-left: 1.2rem; font-size: 0.9rem; }}
  .section.added {{ border-left: 4px solid var(--added); }}
  .section.missing {{ border-left: 4px solid var(--missing); }}
  .gallery {{ display: grid; grid-template-columns: repeat(auto-fill, minmax(320px, 1fr)); gap: 0.8rem; }}
  .snapshot-card {{ border: 1px solid var(--border); border-radius: 6px; padding: 0.6rem; }}
  .snapshot-card.failed {{ border-color: var(--failed); }}
  .snapshot-header {{ font-size: 0.85rem; margin-bottom: 0.4rem; word-break: break-all; }}
  .snapshot-meta {{ display: block; font-size: 0.78rem; color: var(--muted); }}
  .snapshot-card img {{ width: 100%; border-radius: 4px; cursor: pointer; }}
  .snapshot-card img.zoomed {{ position: fixed; top: 5%; left: 5%; width: 90%; height: 90%; object-fit: contain; z-index: 1000; background: rgba(0,0,0,0.85); border: none; border-radius: 8px; padding: 1rem; }}
  .failure-banner {{ background: #fff7ed; border: 1px solid #fed7aa; color: #9a3412; border-radius: 6px; padding: 0.6rem 0.8rem; font-size: 0.85rem; }}
</style>
</head>
<body>
<div class="container">
  <h1>{html.escape(title)}</h1>

  <div class="summary">
    <div class="stat"><div class="value">{result.unchanged_count}/{result.base_files_length}</div><div class="label">Unchanged</div></div>
    <div class="stat changed"><div class="value">{len(result.changed_snapshots)}</div><div class="label">Changed</div></div>
    <div class="stat added"><div class="value">{len(result.new_snapshots)}</div><div class="label">Added</div></div>
    <div class="stat missing"><div class="value">{len(result.missing_snapshots)}</div><div class="label">Missing</div></div>
    <div class="stat failed"><div class="value">{len(result.failed_snapshots)}</div><div class="label">Failed</div></div>
  </div>

  {changed_section}
  {_build_name_list("Added", "added", result.new_snapshots)}
  {_build_name_list("Missing", "missing", result.missing_snapshots)}
</div>
</body>
</html>'''

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(page)
    logger.debug("Wrote gallery with %d changed snapshots to %s", len(cards), output_path)
