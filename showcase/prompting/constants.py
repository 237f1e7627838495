"""Shared constants for showcase prompting."""

from __future__ import annotations

README_PROMPT_CHARS = 3500
REFINEMENT_PREFIX_CHARS = 12000

BACK_LINK_HREF = "../../index.html"

# Design tokens inlined into every generated page.
DESIGN_CSS = """
:root {
  --bg-primary:#f5f5f7; --bg-secondary:#ffffff; --bg-tertiary:#f0f0f2; --bg-card:#ffffff;
  --text-primary:rgb(43,25,16); --text-secondary:#86868b; --border-color:rgba(0,0,0,0.08);
  --accent-color:rgb(224,100,57); --accent-hover:rgb(200,85,45); --accent-subtle:rgba(224,100,57,0.1);
  --success-color:#34c759; --warning-color:#ff9500; --error-color:#ff3b30; --info-color:#007aff;
  --shadow-sm:0 1px 2px 0 rgba(0,0,0,0.05);
  --shadow-md:0 4px 6px -1px rgba(0,0,0,0.1),0 2px 4px -1px rgba(0,0,0,0.06);
  --shadow-lg:0 8px 32px rgba(0,0,0,0.12);
  --radius-sm:8px; --radius-md:12px; --radius-lg:16px; --radius-xl:24px;
}
[data-theme="dark"] {
  --bg-primary:#000000; --bg-secondary:#1c1c1e; --bg-tertiary:#2c2c2e; --bg-card:#1c1c1e;
  --text-primary:#f5f5f7; --text-secondary:#86868b; --border-color:rgba(255,255,255,0.1);
  --accent-color:rgb(224,100,57); --accent-hover:rgb(240,115,70); --accent-subtle:rgba(224,100,57,0.15);
  --success-color:#30d158; --warning-color:#ff9f0a; --error-color:#ff453a; --info-color:#0a84ff;
  --shadow-sm:0 1px 2px 0 rgba(0,0,0,0.3);
  --shadow-md:0 4px 6px -1px rgba(0,0,0,0.4),0 2px 4px -1px rgba(0,0,0,0.2);
  --shadow-lg:0 8px 32px rgba(0,0,0,0.5);
}
*,*::before,*::after{box-sizing:border-box;margin:0;padding:0}
html{font-family:-apple-system,BlinkMacSystemFont,"SF Pro Display","Segoe UI",Roboto,sans-serif;-webkit-font-smoothing:antialiased}
body{background:var(--bg-primary);color:var(--text-primary);min-height:100vh;transition:background .3s,color .3s}
""".strip()

REFINEMENT_DIRECTIVES: tuple[str, ...] = (
    "Fix any layout bugs, broken dark mode, or poor contrast",
    "Add richer visual elements: diagrams, flow arrows, stat tiles, progress indicators",
    "Improve information density and scannability; use a grid layout where possible",
    'Ensure every section matches the "{type}" visual template',
    "Tighten copy: be specific, punchy, and informative",
    "Enhance mobile responsiveness",
)

REFINEMENT_LABELS: tuple[str, ...] = (
    "Improving visual hierarchy and layout…",
    "Enhancing typography and spacing…",
    "Adding more icons, diagrams, and visual elements…",
    "Refining color usage and contrast…",
    "Improving content clarity and copywriting…",
    "Enhancing cards, stat tiles, and data displays…",
    "Perfecting dark/light mode consistency…",
    "Adding interactive flourishes and hover effects…",
    "Final visual polish and responsiveness…",
)

DEFAULT_REFINEMENT_LABEL = "Refining…"


__all__ = [
    "BACK_LINK_HREF",
    "DEFAULT_REFINEMENT_LABEL",
    "DESIGN_CSS",
    "README_PROMPT_CHARS",
    "REFINEMENT_DIRECTIVES",
    "REFINEMENT_LABELS",
    "REFINEMENT_PREFIX_CHARS",
]
