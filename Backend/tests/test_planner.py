# tests/test_planner.py
"""
Tests for the planner service and the /api/plan route.
"""
import json

import pytest

from appforge.core.constants import DEFAULT_PROJECT_TITLE, PLAN_CONFIRMATION_MESSAGE
from appforge.services.planner import Planner, canned_plan, describe_feature, format_plan

from conftest import ScriptedProvider, make_gateway


PLAN_JSON = json.dumps({
    "description": "A focused todo app",
    "features": ["Add tasks", {"name": "Filters", "description": "by status"}],
    "frontendFiles": ["src/App.tsx", {"name": "src/Nav.tsx"}],
})


class TestFormatting:

    @pytest.mark.parametrize("feature,expected", [
        ("Add tasks", "Add tasks"),
        ({"name": "Filters", "description": "by status"}, "Filters: by status"),
        ({"title": "Auth", "details": "email login"}, "Auth: email login"),
        ({"feature": "Charts", "implementation": "recharts"}, "Charts: recharts"),
        ({"area": "ui", "note": "dark"}, "area: ui - note: dark"),
        (7, "7"),
    ])
    def test_describe_feature(self, feature, expected):
        assert describe_feature(feature) == expected

    def test_format_plan(self):
        text = format_plan(json.loads(PLAN_JSON))

        assert text == (
            "A focused todo app\n\n"
            "FEATURES:\n1. Add tasks\n2. Filters: by status\n\n"
            "ARCHITECTURE:\n- src/App.tsx\n- src/Nav.tsx"
        )

    def test_format_plan_with_extra_images(self):
        text = format_plan({"description": "Clone"}, [{"alt": "hero", "src": "https://x/hero.png"}])

        assert "EXTRA IMAGES FOUND:\nhero - https://x/hero.png" in text

    def test_canned_plan(self):
        plan = canned_plan("a shop")

        assert plan["message"] == PLAN_CONFIRMATION_MESSAGE
        assert plan["plan"].startswith("PROJECT: a shop")


class TestCreatePlan:

    @pytest.mark.asyncio
    async def test_original_project(self, image_pipeline, tool_registry):
        primary = ScriptedProvider('{"isCloning": false, "url": null}', PLAN_JSON, '"Todo Master"')
        planner = Planner(make_gateway(primary), image_pipeline, tool_registry)

        result = await planner.create_plan("Build a todo app", model="gpt-4.1")

        assert result["title"] == "Todo Master"
        assert result["message"] == PLAN_CONFIRMATION_MESSAGE
        assert result["plan"].startswith("A focused todo app")
        assert result["url"] == ""
        assert all(call["tools"] is None for call in primary.calls)

    @pytest.mark.asyncio
    async def test_clone_request_uses_screenshot(self, image_pipeline, tool_registry, fake_fetcher):
        primary = ScriptedProvider(
            '{"isCloning": true, "url": "https://stripe.com"}',
            PLAN_JSON,
            "Stripe Clone",
        )
        planner = Planner(make_gateway(primary), image_pipeline, tool_registry)

        result = await planner.create_plan("Clone stripe.com")

        assert result["url"] == "https://cdn.example.com/shot.png"
        assert fake_fetcher.requested == ["https://cdn.example.com/shot.png"]
        planning_content = primary.calls[1]["messages"][1]["content"]
        assert planning_content[1]["type"] == "image_url"

    @pytest.mark.asyncio
    async def test_unparsable_plan_uses_raw_text(self, image_pipeline, tool_registry):
        primary = ScriptedProvider("not json", "Plain prose plan with no structure", "")
        planner = Planner(make_gateway(primary), image_pipeline, tool_registry)

        result = await planner.create_plan("Build a blog")

        assert result["title"] == DEFAULT_PROJECT_TITLE
        assert "Analysis of: Build a blog" in result["plan"]
        assert "FEATURES:" in result["plan"]

    @pytest.mark.asyncio
    async def test_failure_returns_canned_plan(self, image_pipeline, tool_registry):
        primary = ScriptedProvider(RuntimeError("down"), RuntimeError("still down"))
        planner = Planner(make_gateway(primary), image_pipeline, tool_registry)

        result = await planner.create_plan("Build a blog")

        assert result == canned_plan("Build a blog")


class TestPlanRoute:

    @pytest.mark.asyncio
    async def test_plan_endpoint(self, async_client, services, image_pipeline, tool_registry):
        primary = ScriptedProvider('{"isCloning": false}', PLAN_JSON, "Todo Master")
        services.planner = Planner(make_gateway(primary), image_pipeline, tool_registry)

        response = await async_client.post("/api/plan", json={"input": "Build a todo app"})

        assert response.status_code == 200
        assert response.json()["title"] == "Todo Master"

    @pytest.mark.asyncio
    async def test_empty_input(self, async_client):
        response = await async_client.post("/api/plan", json={"input": "   "})

        assert response.status_code == 400
