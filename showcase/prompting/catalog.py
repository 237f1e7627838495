"""Visual template catalog keyed by repository classification."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..models import Classification

_TEMPLATES = {
    Classification.ML: """
VISUAL TEMPLATE: Research Pipeline / Data Science
- Hero section: dataset/project name with a prominent "data science" visual indicator
- Horizontal pipeline diagram showing stages as connected cards:
  Raw Data → Preprocessing → Feature Engineering → Model Training → Evaluation → Results
- Key metrics panel: accuracy, F1, RMSE, or similar, displayed as large colorful STAT TILES
- "Data Snapshot" section: mock/described table preview of the dataset (5 rows)
- Model architecture or algorithm callout card
- Results visualization section with bar/line chart represented as styled divs
- Color palette: blues, purples, teals for a scientific feel
- Icons: 🧪 📊 🔬 📈 🤖""",
    Classification.API: """
VISUAL TEMPLATE: Interactive API Map
- Hero: service name + one-sentence description of what the API does
- Endpoint gallery: each route as a card with METHOD badge:
  GET (green), POST (blue), PUT (yellow), DELETE (red), PATCH (orange)
  Include: path, brief description, request/response summary
- Architecture diagram as a horizontal flow:
  Client → API Gateway → Middleware → Routes → Database/Services
- Authentication section with shield icon showing auth method (JWT, OAuth, API key)
- Key stats tiles: number of endpoints, auth type, database, avg response time
- Color palette: greens, teals, with method-color accents
- Icons: 🌐 🔒 ⚡ 🛡️ 📡""",
    Classification.CLI: """
VISUAL TEMPLATE: Terminal-Style Showcase
- Hero: tool name displayed in a REALISTIC dark terminal window with the command:
  $ tool-name --help  (then show the help output styled as terminal text)
- Command tree: visual hierarchy of subcommands and flags, styled like a file tree
  ├── command1 [flags]
  └── command2 [flags]
- "What it does" as 3 punchy icon+text feature cards
- Example usage section: multiple dark code blocks with realistic, practical examples
- Installation section: package manager commands (npm install -g / cargo install / pip install)
- Color palette: dark background (#0d1117), green terminal text, amber for prompts
- Icons: 💻 ⚙️ 🔧 🚀 📦""",
    Classification.FRONTEND: """
VISUAL TEMPLATE: Component Showcase / UI Gallery
- Hero: app name + tagline, with a gradient glass card and screenshot-like wireframe
- Component map: a visual grid of key UI components as mini labeled cards with icons
- Page/route flow diagram: screens connected by arrows
  e.g. Landing → Login → Dashboard → Settings → Profile
- Tech stack badges: React/Vue/Svelte, styling library, build tool, etc.
- "Key Screens" section: describe/sketch 3-4 main views as labeled wireframe-style cards
- Feature highlights: 3-6 cards describing what makes the UX special
- Color palette: vibrant gradients, glassmorphism, product-design feel
- Icons: 🎨 ✨ 📱 🖥️ ⚡""",
    Classification.LIBRARY: """
VISUAL TEMPLATE: Developer Docs Landing Page
- Hero: package name + ONE-LINE install command in a prominent copyable code block:
  npm install package-name  or  pip install package  or  cargo add package
  Include version badge and download count stat
- "Why use this?": exactly 3 value-proposition cards with icons and 2-3 sentence descriptions
- API surface table: key functions/methods/classes with signatures and one-line descriptions
- Code example: a realistic, practical usage example in a styled dark code block
- Compatibility section: language/runtime version badges, browser support, bundle size
- Ecosystem/dependency diagram if relevant
- Color palette: clean neutral with accent highlights for a professional docs feel
- Icons: 📦 ⚡ 🔌 🛠️ 📚""",
    Classification.INFRA: """
VISUAL TEMPLATE: Cloud Architecture Diagram
- Hero: what infrastructure this provisions/manages in one clear sentence
- Architecture diagram using styled divs and arrows to show:
  Services (DB, cache, queue, compute nodes) connected by labeled arrows
  Color-code by service type (database=blue, cache=red, compute=green, etc.)
- Resource inventory table: service/resource name, type, region, purpose
- Environment pipeline strip: Dev → Staging → Production with status indicators
- Configuration highlights: key env vars and config options (names and descriptions ONLY, no values)
- Security section: IAM/RBAC, networking rules, secrets management approach
- Color palette: slate, indigo, with service-type color accents
- Icons: ☁️ 🗄️ ⚡ 🔒 🌐 📊""",
    Classification.MONOREPO: """
VISUAL TEMPLATE: Constellation / Package Map
- Hero: monorepo name + total package count + brief description
- Package constellation: a visual graph where each package is a node (styled card)
  Sized differently based on importance/LOC, connected by dependency arrows
  Each package gets its own accent color
- Per-package cards: name, version, description, key exports/entry points
- Dependency matrix: show which packages depend on which (visual grid or arrow map)
- Shared tooling strip: linter, formatter, test runner, CI shown as icon badges
- Getting started section: install + build commands
- Color palette: multi-hue, each package has its own color from a defined palette
- Icons: 🗂️ 📦 🔗 ⚙️ 🚀""",
    Classification.GENERIC: """
VISUAL TEMPLATE: Project Showcase (Default)
- Hero: project name, one-sentence description, and 2-3 key value props as badges
- Overview card: what problem it solves, who it's for, why it matters (NOT a README dump)
- Key Features: 4-6 feature cards, each with an icon, name, and 1-2 sentence description
- How It Works / Architecture: diagram or numbered step-by-step flow with visual connectors
- Tech Stack: language/framework/tool badges in a grid
- Getting Started: installation and quick-start code in a dark code block
- Color palette: clean, professional with orange accent highlights
- Icons: chosen to match the project domain""",
}

TEMPLATES: Mapping[Classification, str] = MappingProxyType(
    {label: text.strip("\n") for label, text in _TEMPLATES.items()}
)


def template_for(classification: Classification | str) -> str:
    """Return the visual template for ``classification``, defaulting to generic."""
    try:
        key = Classification(classification)
    except ValueError:
        return TEMPLATES[Classification.GENERIC]
    return TEMPLATES.get(key, TEMPLATES[Classification.GENERIC])


__all__ = ["TEMPLATES", "template_for"]
