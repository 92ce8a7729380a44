# appforge/services/conversation.py
"""
Conversation store - the persistence seam used by agent turns.

Reads project/user records, bounded history, the latest plan and gallery
assets; writes assistant turns. The current code bundle is fetched from its
URL on every turn (no cache).
"""
import json
import aiohttp
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from appforge.core.config import settings
from appforge.core.constants import START_MARKER, END_MARKER
from appforge.core.exceptions import EntityNotFoundError
from appforge.core.logging import log
from appforge.core.types import Turn
from appforge.models import GalleryImage, Message, Plan, Project, User


BundleLoader = Callable[[str], Awaitable[Any]]


@dataclass
class ConversationSnapshot:
    project: Project
    user: User
    history: List[Turn] = field(default_factory=list)
    plan: Optional[Plan] = None
    code_bundle: Any = None
    gallery: List[Dict[str, Any]] = field(default_factory=list)
    previous_images: List[str] = field(default_factory=list)


def to_turn(message: Message) -> Turn:
    return Turn(
        id=str(message.id) if message.id else None,
        role="user" if message.role == "user" else "assistant",
        text=message.text,
        images=list(message.images or []),
        created_at=message.created_at,
    )


def previous_images(project: Project) -> List[str]:
    """Reference image the project was started from, if any."""
    if not project.enh_prompt:
        return []
    try:
        parsed = json.loads(project.enh_prompt)
    except (json.JSONDecodeError, TypeError):
        return []
    if isinstance(parsed, dict) and parsed.get("data") and isinstance(parsed.get("url"), str):
        return [parsed["url"]]
    return []


async def fetch_code_bundle(url: str) -> Any:
    async with aiohttp.ClientSession() as session:
        async with session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=settings.conversation.bundle_timeout),
        ) as response:
            if response.status != 200:
                raise ValueError(f"Bundle fetch returned HTTP {response.status}")
            return await response.json(content_type=None)


class ConversationStore:
    def __init__(
        self,
        history_limit: Optional[int] = None,
        gallery_limit: Optional[int] = None,
        bundle_loader: Optional[BundleLoader] = None,
    ):
        self.history_limit = history_limit or settings.conversation.history_limit
        self.gallery_limit = gallery_limit or settings.conversation.gallery_limit
        self._load_bundle = bundle_loader or fetch_code_bundle

    async def resolve(self, project_key: str, email: str) -> Tuple[Project, User]:
        """
        Raises:
            EntityNotFoundError: unknown project or user
        """
        project = await Project.find_one(Project.generated_name == project_key)
        if project is None:
            raise EntityNotFoundError("Project", project_key)
        user = await User.find_one(User.email == email)
        if user is None:
            raise EntityNotFoundError("User", email)
        return project, user

    async def history(self, project: Project, user: User) -> List[Turn]:
        """Last N turns, fetched newest-first and returned oldest-first."""
        recent = await (
            Message.find(Message.project_id == str(project.id), Message.user_id == str(user.id))
            .sort(-Message.created_at)
            .limit(self.history_limit)
            .to_list()
        )
        return [to_turn(message) for message in reversed(recent)]

    async def latest_plan(self, project: Project, user: User) -> Optional[Plan]:
        plans = await (
            Plan.find(Plan.project_id == str(project.id), Plan.user_id == str(user.id))
            .sort(-Plan.created_at)
            .limit(1)
            .to_list()
        )
        return plans[0] if plans else None

    async def gallery(self, project_key: str) -> List[Dict[str, Any]]:
        images = await (
            GalleryImage.find(GalleryImage.project_id == project_key, GalleryImage.status == "active")
            .sort(-GalleryImage.created_at)
            .limit(self.gallery_limit)
            .to_list()
        )
        return [{"label": image.label, "url": image.image_url} for image in images]

    async def load_code_bundle(self, url: Optional[str]) -> Any:
        if not url:
            return None
        try:
            return await self._load_bundle(url)
        except Exception as e:
            log("CONTEXT", f"Could not load code bundle {url}: {e}")
            return None

    async def load(self, project_key: str, email: str) -> ConversationSnapshot:
        project, user = await self.resolve(project_key, email)

        try:
            gallery = await self.gallery(project_key)
        except Exception as e:
            log("CONTEXT", f"Gallery lookup failed: {e}", project_id=project_key)
            gallery = []

        snapshot = ConversationSnapshot(
            project=project,
            user=user,
            history=await self.history(project, user),
            plan=await self.latest_plan(project, user),
            code_bundle=await self.load_code_bundle(project.url),
            gallery=gallery,
            previous_images=previous_images(project),
        )
        log(
            "CONTEXT",
            f"{len(snapshot.history)} turns, {len(gallery)} gallery images, bundle={'yes' if snapshot.code_bundle else 'no'}",
            project_id=project_key,
        )
        return snapshot

    async def save_message(
        self,
        project: Project,
        user: User,
        text: str,
        role: str = "ai",
        images: Optional[List[str]] = None,
        plan: Optional[str] = None,
    ) -> Message:
        message = Message(
            project_id=str(project.id),
            user_id=str(user.id),
            text=text,
            role=role,
            images=images or [],
        )
        await message.insert()

        if plan:
            cleaned = plan.replace(START_MARKER, "").replace(END_MARKER, "").strip()
            await Plan(project_id=str(project.id), user_id=str(user.id), text=cleaned, role=role).insert()

        await self.record_turn(project, user, role)
        return message

    async def record_turn(self, project: Project, user: User, role: str) -> None:
        """Spend one prompt credit and remember who spoke last."""
        if user.prompt_count > 0:
            user.prompt_count -= 1
            await user.save()
        project.last_responder = "user" if role == "user" else "ai"
        await project.save()
