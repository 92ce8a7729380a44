# appforge/services/planner.py
"""
Planner - turns a project request into a reviewable development plan.

Steps:
1. Clone-intent detection (JSON-only model call)
2. Screenshot capture for clone requests
3. Image ingestion (limited for context size)
4. Model-specific planning call
5. Title call
6. Plan extraction and formatting
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from appforge.core.config import settings
from appforge.core.constants import DEFAULT_PROJECT_TITLE, PLAN_CONFIRMATION_MESSAGE
from appforge.core.logging import log, log_section
from appforge.extraction.extractor import extract, file_label
from appforge.llm.gateway import ModelGateway
from appforge.llm.messages import system_message, user_message
from appforge.llm.prompts import planning
from appforge.media.images import ImagePipeline
from appforge.tools.registry import ToolRegistry


@dataclass
class CloneAnalysis:
    is_cloning: bool = False
    url: Optional[str] = None
    screenshot_url: Optional[str] = None
    extra_images: Optional[List[Dict[str, Any]]] = None


def canned_plan(user_input: str) -> Dict[str, str]:
    """Returned when planning fails outright."""
    return {
        "title": "Development Plan",
        "message": PLAN_CONFIRMATION_MESSAGE,
        "plan": (
            f"PROJECT: {user_input}\n\n"
            "FRONTEND FILES:\n- src/components/App.tsx\n- src/pages/Home.tsx\n\n"
            "BACKEND ROUTES:\n- GET /api/health - Health check\n\n"
            "BRAND KIT:\n- Font: Inter\n- Colors: Primary #3B82F6\n- Spacing: Tailwind default"
        ),
        "url": "",
    }


def describe_feature(feature: Any) -> str:
    if isinstance(feature, str):
        return feature
    if isinstance(feature, dict):
        for name_key, detail_key in (("name", "description"), ("title", "details"), ("feature", "implementation")):
            if feature.get(name_key) and feature.get(detail_key):
                return f"{feature[name_key]}: {feature[detail_key]}"
        return " - ".join(f"{key}: {value}" for key, value in feature.items())
    return str(feature)


def format_plan(plan: Dict[str, Any], extra_images: Optional[List[Dict[str, Any]]] = None) -> str:
    """Plain-text rendering: description, extra images, features, architecture."""
    text = ""
    if plan.get("description"):
        text += f"\n{plan['description']}\n\n"

    if extra_images:
        text += "\nEXTRA IMAGES FOUND:\n"
        for image in extra_images:
            text += f"{image.get('alt', '')} - {image.get('src', '')}\n"

    features = plan.get("features")
    if isinstance(features, list):
        text += "FEATURES:\n"
        for index, feature in enumerate(features, start=1):
            text += f"{index}. {describe_feature(feature)}\n"
        text += "\n"

    files = plan.get("frontendFiles")
    if isinstance(files, list):
        text += "ARCHITECTURE:\n"
        for entry in files:
            text += f"- {file_label(entry)}\n"
    return text.strip()


class Planner:
    def __init__(self, gateway: ModelGateway, images: ImagePipeline, tools: ToolRegistry):
        self.gateway = gateway
        self.images = images
        self.tools = tools

    async def analyze_clone_intent(self, user_input: str, model: str) -> CloneAnalysis:
        analysis = CloneAnalysis()
        try:
            response = await self.gateway.invoke(
                [
                    system_message(planning.CLONE_ANALYSIS_SYSTEM),
                    user_message(planning.clone_analysis_prompt(user_input)),
                ],
                model=model,
                bind_tools=False,
            )
        except Exception as e:
            log("PLANNER", f"Clone analysis failed: {e}")
            return analysis

        result = extract(response.text)
        if result.is_synthetic or not isinstance(result.data, dict):
            log("PLANNER", "Clone analysis unparsable, assuming original development")
            return analysis

        analysis.is_cloning = bool(result.data.get("isCloning"))
        url = result.data.get("url")
        analysis.url = url if isinstance(url, str) and url and url != "null" else None

        if analysis.is_cloning and analysis.url:
            shot = await self.tools.run("screenshot", {"url": analysis.url})
            if shot.get("success") and isinstance(shot.get("result"), dict):
                payload = shot["result"]
                analysis.screenshot_url = payload.get("screenshotUrl") or None
                html = payload.get("html") if isinstance(payload.get("html"), dict) else {}
                if html.get("images"):
                    analysis.extra_images = [img for img in html["images"] if isinstance(img, dict)]
            else:
                log("PLANNER", f"Screenshot failed: {shot.get('error')}")
        return analysis

    async def generate_title(self, plan_text: str, model: str) -> str:
        try:
            response = await self.gateway.invoke(
                [system_message(planning.TITLE_SYSTEM), user_message(planning.title_prompt(plan_text))],
                model=model,
                bind_tools=False,
            )
        except Exception as e:
            log("PLANNER", f"Title generation failed: {e}")
            return DEFAULT_PROJECT_TITLE
        title = response.text.strip().replace('"', "").replace("'", "")
        return title or DEFAULT_PROJECT_TITLE

    async def create_plan(
        self,
        user_input: str,
        images: Optional[List[str]] = None,
        memory: Optional[str] = None,
        css_library: Optional[str] = None,
        framework: Optional[str] = None,
        model: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Returns:
            {"title", "message", "plan", "url"}; a canned plan on failure
        """
        model = model or settings.llm.default_model
        log_section("PLANNER", f"Planning with {model}")
        try:
            clone = await self.analyze_clone_intent(user_input, model)

            image_urls = list(images or [])
            if clone.screenshot_url:
                image_urls.append(clone.screenshot_url)
            image_parts = (await self.images.parts(image_urls))[: settings.images.planner_image_limit]

            response = await self.gateway.invoke(
                [
                    system_message(planning.planning_system_prompt(model, clone.is_cloning)),
                    user_message(
                        planning.planning_prompt(
                            user_input,
                            model,
                            clone.is_cloning,
                            memory=memory,
                            css_library=css_library,
                            framework=framework,
                            screenshot_url=clone.screenshot_url,
                        ),
                        image_parts,
                    ),
                ],
                model=model,
                bind_tools=False,
            )
            if not response.text:
                raise ValueError(f"Empty planning response from {model}")

            title = await self.generate_title(response.text, model)
            plan = extract(response.text, label=user_input).data
            if not isinstance(plan, dict):
                plan = {"rawPlan": response.text}

            text = format_plan(plan, clone.extra_images) or plan.get("rawPlan") or response.text

            url = clone.screenshot_url or ""
            if isinstance(plan.get("url"), str) and plan["url"].strip():
                url = plan["url"]

            log("PLANNER", f"Plan ready: {title}")
            return {
                "title": title,
                "message": PLAN_CONFIRMATION_MESSAGE,
                "plan": text,
                "url": url,
            }
        except Exception as e:
            log("PLANNER", f"Planning failed: {e}")
            return canned_plan(user_input)
