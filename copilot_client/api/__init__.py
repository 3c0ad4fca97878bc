from .builder import CHAT_PATH, EMBEDDINGS_PATH, build_chat_request, build_embedding_request
from .catalog import AGENTS_PATH, MODELS_PATH, ModelCatalog, fetch_agents, fetch_models
from .transport import TransportClient

__all__ = [
    "CHAT_PATH",
    "EMBEDDINGS_PATH",
    "build_chat_request",
    "build_embedding_request",
    "AGENTS_PATH",
    "MODELS_PATH",
    "ModelCatalog",
    "fetch_agents",
    "fetch_models",
    "TransportClient",
]
