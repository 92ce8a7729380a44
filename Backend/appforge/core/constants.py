# appforge/core/constants.py
"""
Shared literals: graph node names, payload markers and fallback texts.
"""
from enum import Enum


class NodeName(str, Enum):
    """States of the execution graph transition table."""
    ROUTER = "router"
    TOOL = "tool"
    GENERATE = "generate"
    TERMINAL = "terminal"


# Routing values the coordinator may emit under "NextNode"
NEXT_NODE_GENERATE = "frontend"
NEXT_NODE_TOOLS = "tools"

# Generation payload markers
START_MARKER = "___start___"
END_MARKER = "___end___"

# Router fallback; carries no NextNode, so routing terminates
ROUTER_FALLBACK_TEXT = (
    "I encountered an error processing your request. Let's try a simpler approach."
)

# Default generation bundle used when the generation call fails
FALLBACK_PACKAGE_JSON = {
    "name": "frontend-app",
    "private": True,
    "version": "0.0.0",
    "type": "module",
    "scripts": {
        "dev": "vite",
        "build": "tsc && vite build",
        "preview": "vite preview",
    },
    "dependencies": {
        "react": "^18.2.0",
        "react-dom": "^18.2.0",
        "lucide-react": "^0.263.1",
    },
    "devDependencies": {
        "@types/react": "^18.0.28",
        "@types/react-dom": "^18.0.11",
        "@vitejs/plugin-react": "^3.1.0",
        "tailwindcss": "^3.2.7",
        "typescript": "^4.9.3",
        "vite": "^4.1.0",
    },
}

DEFAULT_PROJECT_TITLE = "New Project"
PLAN_CONFIRMATION_MESSAGE = "Should I continue with this plan?"

# Features used when a plan cannot be parsed at all
SYNTHETIC_FEATURES = [
    "Core functionality implementation",
    "User interface development",
    "Backend API integration",
]
