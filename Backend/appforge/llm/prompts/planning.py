# appforge/llm/prompts/planning.py
"""
Planning prompts - clone detection, model-specific plan request and title.
"""
from typing import Optional


CLONE_ANALYSIS_SYSTEM = "Reply only in JSON format."

TITLE_SYSTEM = "Generate concise project titles only."

# Per-model persona and the key carrying replication details when cloning
_MODEL_STYLES = {
    "claude-sonnet-4": ("an expert frontend architect", "replicationSpecs"),
    "claude-3.7-sonnet": ("an expert frontend architect", "replicationSpecs"),
    "gemini-2.5-pro": ("a senior frontend technical lead specializing in multimodal analysis", "visualAnalysis"),
    "grok-3": ("a pragmatic frontend development strategist", "cloneStrategy"),
    "kimi-k2": ("a meticulous frontend system architect", "replicationDetails"),
}
_DEFAULT_STYLE = ("a comprehensive frontend software architect", "visualReplication")

_CLONING_REQUIREMENTS = """EXACT CLONING REQUIREMENTS (FRONTEND-ONLY):
- Layout: match every spacing, alignment and position with CSS Grid/Flexbox
- Behaviour: recreate interactions, animations and hover effects with React
- Styling: match colors, fonts, shadows and borders exactly
- Components: break every UI element down into React components
- Responsive: identical behaviour across device sizes
- No backend: mock data, localStorage or static JSON only"""

_ORIGINAL_DELIVERABLES = """FRONTEND-FOCUSED DELIVERABLES:
1. Frontend architecture: React component hierarchy and file organization (primary focus)
2. UI/UX implementation: component design and interaction patterns
3. Design system: typography, colors and spacing
4. Frontend features: client-side functionality with hooks and state management
5. Minimal backend: basic REST endpoints only if absolutely necessary"""

_CONSTRAINTS = """FRONTEND-ONLY CONSTRAINTS:
- No WebSockets, WebRTC or real-time features
- No complex server-side logic
- Focus on React components, state management and UI logic
- Use client-side storage and mock data"""


def clone_analysis_prompt(user_input: str) -> str:
    return f"""
Analyze whether this is a cloning/replication request:
"{user_input}"

If the url has no http/https scheme, add it.
Do not wrap the JSON in code fences.

Reply with JSON: {{"isCloning": true/false, "url": "url_if_found_or_null"}}"""


def planning_system_prompt(model: str, is_cloning: bool) -> str:
    purpose = "visual replication" if is_cloning else "development planning"
    return f"You are a {model} planning specialist. Generate precise JSON responses for {purpose}."


def planning_prompt(
    user_input: str,
    model: str,
    is_cloning: bool,
    memory: Optional[str] = None,
    css_library: Optional[str] = None,
    framework: Optional[str] = None,
    screenshot_url: Optional[str] = None,
) -> str:
    """Model-specific planning request asking for the plan JSON shape."""
    persona, replication_key = _MODEL_STYLES.get(model, _DEFAULT_STYLE)

    if is_cloning:
        goal = "analyze the visual references and write a pixel-perfect, frontend-only replication plan"
        body = _CLONING_REQUIREMENTS
        routes = ""
        features = '"Layout replication with exact CSS measurements", "React component-based functionality", "Client-side data with localStorage"'
        replication = (
            f',\n  "{replication_key}": {{"layout": "exact CSS structure", '
            '"components": ["every React component"], "dataStrategy": "client-side mock data"}'
        )
    else:
        goal = "design a frontend-focused development blueprint"
        body = _ORIGINAL_DELIVERABLES
        routes = '{"method": "GET", "path": "/api/basic-data", "purpose": "Simple data endpoint"}'
        features = '"Frontend feature 1 with React details", "UI feature 2 with interaction patterns"'
        replication = ""

    return f"""
PROJECT REQUEST: {user_input}
CONTEXT MEMORY: {memory or "None provided"}
CSS FRAMEWORK: {css_library or "Tailwind CSS"}
FRONTEND FRAMEWORK: {framework or "React"}
REPLICATION MODE: {"Yes - Clone existing design" if is_cloning else "No - Original development"}
URL SOURCE: {"Screenshot image hosted on a CDN" if screenshot_url else "No URL provided"}

As {persona}, {goal}.

{body}

{_CONSTRAINTS}

RESPONSE FORMAT - return clean JSON without markdown:
{{
  "description": "Project overview",
  "features": [{features}],
  "frontendFiles": ["src/components/Header.tsx", "src/pages/Home.tsx", "src/hooks/useLocalStorage.ts"],
  "backendRoutes": [{routes}],
  "brandKit": {{"primaryFont": "font-name", "colorPalette": {{"primary": "#hex", "secondary": "#hex"}}}},
  "url": "{screenshot_url or ""}"{replication}
}}"""


def title_prompt(plan_text: str) -> str:
    return f"""Based on this plan, generate a 2-4 word project title:
{plan_text}

Reply with ONLY the title (no quotes, no extra text)."""
