# appforge/services/container.py
"""
Service container - every long-lived collaborator, built once at startup
and handed to request handlers through app.state.
"""
from dataclasses import dataclass

from appforge.graph.engine import ExecutionGraph
from appforge.llm.gateway import ModelGateway
from appforge.media.images import ImagePipeline
from appforge.queue.build_queue import BuildQueue
from appforge.services.agent_service import AgentService
from appforge.services.conversation import ConversationStore
from appforge.services.planner import Planner
from appforge.streaming.relay import StreamRelay
from appforge.tools.capabilities import RemoteCapabilities, build_registry
from appforge.tools.registry import ToolRegistry


@dataclass
class Services:
    gateway: ModelGateway
    images: ImagePipeline
    tools: ToolRegistry
    store: ConversationStore
    build_queue: BuildQueue
    agent: AgentService
    planner: Planner

    async def close(self) -> None:
        await self.gateway.close()


def build_services() -> Services:
    tools = build_registry(RemoteCapabilities())
    gateway = ModelGateway(tool_schemas=tools.schemas())
    images = ImagePipeline()
    store = ConversationStore()
    graph = ExecutionGraph(gateway, tools, images)

    return Services(
        gateway=gateway,
        images=images,
        tools=tools,
        store=store,
        build_queue=BuildQueue(),
        agent=AgentService(graph, store, StreamRelay()),
        planner=Planner(gateway, images, tools),
    )
