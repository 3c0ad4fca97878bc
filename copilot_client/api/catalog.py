from __future__ import annotations

from typing import Iterable, Iterator

from ..errors import ModelNotFoundError
from ..schemas import Agent, Credential, Model, parse_agents, parse_models
from .transport import TransportClient

MODELS_PATH = "/models"
AGENTS_PATH = "/agents"


async def fetch_models(transport: TransportClient, credential: Credential) -> list[Model]:
    """GET /models, in the order the service lists them."""
    return parse_models(await transport.get_json(MODELS_PATH, credential))


async def fetch_agents(transport: TransportClient, credential: Credential) -> list[Agent]:
    """GET /agents, in the order the service lists them."""
    return parse_agents(await transport.get_json(AGENTS_PATH, credential))


class ModelCatalog:
    """
    Read-only set of models (and optionally agents) fetched once.
    `agents` is None when the agent list was not fetched.

    Filled at construction and never mutated afterwards, so concurrent
    readers need no locking. Membership is an exact, case-sensitive id match.
    """

    __slots__ = ("_models", "_agents", "_by_id")

    def __init__(self, models: Iterable[Model] = (), agents: Iterable[Agent] | None = None):
        self._models: tuple[Model, ...] = tuple(models)
        self._agents: tuple[Agent, ...] | None = None if agents is None else tuple(agents)
        by_id: dict[str, Model] = {}
        for m in self._models:
            by_id.setdefault(m.id, m)
        self._by_id = by_id

    @classmethod
    async def fetch(
        cls,
        transport: TransportClient,
        credential: Credential,
        include_agents: bool = False,
    ) -> "ModelCatalog":
        models = await fetch_models(transport, credential)
        agents = await fetch_agents(transport, credential) if include_agents else None
        return cls(models, agents)

    @property
    def models(self) -> tuple[Model, ...]:
        return self._models

    @property
    def agents(self) -> tuple[Agent, ...] | None:
        return self._agents

    def ids(self) -> list[str]:
        return [m.id for m in self._models]

    def get(self, model_id: str) -> Model:
        try:
            return self._by_id[model_id]
        except KeyError:
            raise ModelNotFoundError(model_id, self.ids()) from None

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._by_id

    def __iter__(self) -> Iterator[Model]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def __repr__(self) -> str:
        agents = None if self._agents is None else len(self._agents)
        return f"ModelCatalog(models={self.ids()!r}, agents={agents})"
