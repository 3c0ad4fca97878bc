import json
import os
import tempfile
import unittest
from unittest import mock

import httpx

from copilot_client import (
    Agent,
    ClientSettings,
    CopilotClient,
    DeserializeError,
    HttpError,
    InvalidRequestError,
    Message,
    Model,
    ModelCatalog,
    ModelNotFoundError,
    TokenNotFoundError,
)

MODELS = {"data": [
    {"id": "gpt-4", "name": "GPT 4", "version": "gpt-4-0613", "max_input_tokens": 32768},
    {"id": "gpt-3.5", "name": "GPT 3.5"},
]}
AGENTS = {"agents": [{"id": "github", "name": "GitHub", "description": "Ask about repos"}]}
CHAT = {"choices": [{
    "message": {"role": "assistant", "content": "Use httpx."},
    "finish_reason": "stop",
    "usage": {"total_tokens": 42},
}]}
TOKEN = {"token": "tid=session", "expires_at": 1700000000}


class FakeCopilot:
    """Routes requests to canned JSON; `overrides` replaces a route's response."""

    def __init__(self, **overrides):
        self.requests: list[httpx.Request] = []
        self.overrides = overrides

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.overrides:
            return self.overrides[path](request)
        if path == "/copilot_internal/v2/token":
            return httpx.Response(200, json=TOKEN)
        if path == "/models":
            return httpx.Response(200, json=MODELS)
        if path == "/agents":
            return httpx.Response(200, json=AGENTS)
        if path == "/chat/completions":
            return httpx.Response(200, json=CHAT)
        if path == "/embeddings":
            inputs = json.loads(request.content)["input"]
            # out of order on purpose; the client sorts by index
            data = [{"index": i, "embedding": [float(i), 0.5]} for i in range(len(inputs))]
            return httpx.Response(200, json={"data": data[::-1]})
        return httpx.Response(404, json={"error": "not found"})


class ClientTestCase(unittest.IsolatedAsyncioTestCase):
    def http(self, fake: FakeCopilot) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
        self.addAsyncCleanup(client.aclose)
        return client

    def client(self, fake: FakeCopilot, catalog: ModelCatalog | None = None, **kwargs) -> CopilotClient:
        return CopilotClient("tok", "Neovim/0.9.0", catalog=catalog, http_client=self.http(fake), **kwargs)


def catalog_of(*ids: str) -> ModelCatalog:
    return ModelCatalog([Model(id=i, name=i) for i in ids])


class TestChatCompletion(ClientTestCase):
    async def test_unknown_model_makes_no_network_call(self):
        fake = FakeCopilot()
        client = self.client(fake, catalog_of("gpt-4", "gpt-3.5"))
        with self.assertRaises(ModelNotFoundError) as ctx:
            await client.chat_completion([Message("user", "hi")], "gpt-5")
        self.assertEqual(ctx.exception.available, ["gpt-4", "gpt-3.5"])
        self.assertEqual(fake.requests, [])

    async def test_model_match_is_case_sensitive(self):
        fake = FakeCopilot()
        client = self.client(fake, catalog_of("gpt-4"))
        with self.assertRaises(ModelNotFoundError):
            await client.chat_completion([Message("user", "hi")], "GPT-4")
        self.assertEqual(fake.requests, [])

    async def test_no_catalog_refuses(self):
        fake = FakeCopilot()
        with self.assertRaises(ModelNotFoundError):
            await self.client(fake).chat_completion([Message("user", "hi")], "gpt-4")
        self.assertEqual(fake.requests, [])

    async def test_empty_messages_rejected(self):
        fake = FakeCopilot()
        with self.assertRaises(InvalidRequestError):
            await self.client(fake, catalog_of("gpt-4")).chat_completion([], "gpt-4")
        self.assertEqual(fake.requests, [])

    async def test_unsupported_role_rejected(self):
        fake = FakeCopilot()
        with self.assertRaises(InvalidRequestError):
            await self.client(fake, catalog_of("gpt-4")).chat_completion(
                [{"role": "tool", "content": "x"}], "gpt-4"
            )

    async def test_chat_body_and_response(self):
        fake = FakeCopilot()
        client = self.client(fake, catalog_of("gpt-4"))
        response = await client.chat_completion(
            [Message("system", "be brief"), {"role": "user", "content": "http?"}], "gpt-4"
        )

        self.assertEqual(len(fake.requests), 1)
        body = json.loads(fake.requests[0].content)
        self.assertEqual(body, {
            "model": "gpt-4",
            "messages": [
                {"role": "system", "content": "be brief"},
                {"role": "user", "content": "http?"},
            ],
            "n": 1,
            "top_p": 1.0,
            "stream": False,
            "temperature": 0.5,
        })
        self.assertEqual(response.content, "Use httpx.")
        self.assertEqual(response.choices[0].finish_reason, "stop")
        self.assertEqual(response.choices[0].usage.total_tokens, 42)

    async def test_max_tokens_from_settings(self):
        fake = FakeCopilot()
        client = self.client(fake, catalog_of("gpt-4"), settings=ClientSettings(max_tokens=64))
        await client.chat_completion([Message("user", "hi")], "gpt-4")
        self.assertEqual(json.loads(fake.requests[0].content)["max_tokens"], 64)

    async def test_server_error(self):
        fake = FakeCopilot(**{"/chat/completions": lambda r: httpx.Response(500, text="oops")})
        with self.assertRaises(HttpError) as ctx:
            await self.client(fake, catalog_of("gpt-4")).chat_completion([Message("user", "hi")], "gpt-4")
        self.assertEqual(ctx.exception.status_code, 500)

    async def test_schema_mismatch(self):
        fake = FakeCopilot(**{"/chat/completions": lambda r: httpx.Response(200, json={"choices": [{}]})})
        with self.assertRaises(DeserializeError):
            await self.client(fake, catalog_of("gpt-4")).chat_completion([Message("user", "hi")], "gpt-4")


class TestEmbeddings(ClientTestCase):
    async def test_two_inputs_two_embeddings_in_order(self):
        fake = FakeCopilot()
        embeddings = await self.client(fake).get_embeddings(["a", "b"])

        self.assertEqual(len(embeddings), 2)
        self.assertEqual([e.index for e in embeddings], [0, 1])
        self.assertEqual(embeddings[1].embedding, [1.0, 0.5])
        self.assertEqual(json.loads(fake.requests[0].content), {
            "dimensions": 512,
            "input": ["a", "b"],
            "model": "text-embedding-3-small",
        })

    async def test_empty_inputs_rejected(self):
        fake = FakeCopilot()
        with self.assertRaises(InvalidRequestError):
            await self.client(fake).get_embeddings([])
        self.assertEqual(fake.requests, [])

    async def test_single_string_rejected(self):
        with self.assertRaises(InvalidRequestError):
            await self.client(FakeCopilot()).get_embeddings("abc")

    async def test_count_mismatch(self):
        fake = FakeCopilot(**{"/embeddings": lambda r: httpx.Response(
            200, json={"data": [{"index": 0, "embedding": [0.1]}]}
        )})
        with self.assertRaises(DeserializeError):
            await self.client(fake).get_embeddings(["a", "b"])

    async def test_server_error(self):
        fake = FakeCopilot(**{"/embeddings": lambda r: httpx.Response(500)})
        with self.assertRaises(HttpError):
            await self.client(fake).get_embeddings(["a"])

    async def test_non_json_body(self):
        fake = FakeCopilot(**{"/embeddings": lambda r: httpx.Response(200, text="nope")})
        with self.assertRaises(DeserializeError):
            await self.client(fake).get_embeddings(["a"])


class TestCatalog(ClientTestCase):
    async def test_get_models_fetches_without_catalog(self):
        fake = FakeCopilot()
        models = await self.client(fake).get_models()
        self.assertEqual([m.id for m in models], ["gpt-4", "gpt-3.5"])
        self.assertEqual(models[0].max_input_tokens, 32768)
        self.assertEqual(len(fake.requests), 1)

    async def test_get_models_uses_prefetched_catalog(self):
        fake = FakeCopilot()
        models = await self.client(fake, catalog_of("gpt-4")).get_models()
        self.assertEqual([m.id for m in models], ["gpt-4"])
        self.assertEqual(fake.requests, [])

    async def test_get_agents(self):
        fake = FakeCopilot()
        agents = await self.client(fake).get_agents()
        self.assertEqual(agents[0].id, "github")
        self.assertEqual(agents[0].description, "Ask about repos")
        self.assertEqual(fake.requests[0].headers["Editor-Version"], "Neovim/0.9.0")

    async def test_http_500_on_catalog_endpoints(self):
        fake = FakeCopilot(**{
            "/models": lambda r: httpx.Response(500),
            "/agents": lambda r: httpx.Response(500),
        })
        client = self.client(fake)
        with self.assertRaises(HttpError):
            await client.get_models()
        with self.assertRaises(HttpError):
            await client.get_agents()

    async def test_get_agents_uses_prefetched_catalog(self):
        fake = FakeCopilot()
        catalog = ModelCatalog([Model("gpt-4", "GPT 4")], [Agent("github", "GitHub")])
        agents = await self.client(fake, catalog).get_agents()
        self.assertEqual([a.id for a in agents], ["github"])
        self.assertEqual(fake.requests, [])

    async def test_get_agents_fetches_when_catalog_has_none(self):
        fake = FakeCopilot()
        client = self.client(fake, catalog_of("gpt-4"))
        await client.get_agents()
        await client.get_agents()
        self.assertEqual([r.url.path for r in fake.requests], ["/agents", "/agents"])

    async def test_malformed_catalog(self):
        fake = FakeCopilot(**{
            "/models": lambda r: httpx.Response(200, text="garbage"),
            "/agents": lambda r: httpx.Response(200, json={"data": []}),
        })
        client = self.client(fake)
        with self.assertRaises(DeserializeError):
            await client.get_models()
        with self.assertRaises(DeserializeError):
            await client.get_agents()


class TestFromEnv(ClientTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.env = {"XDG_CONFIG_HOME": self._tmp.name, "GITHUB_TOKEN": "gho_env"}

    def tearDown(self):
        self._tmp.cleanup()

    async def test_exchanges_token_once(self):
        fake = FakeCopilot()
        with mock.patch.dict(os.environ, self.env, clear=True):
            client = await CopilotClient.from_env("Neovim/0.9.0", http_client=self.http(fake))

        self.assertEqual(client.credential.token, "tid=session")
        self.assertEqual(len(fake.requests), 1)
        self.assertEqual(fake.requests[0].headers["Authorization"], "token gho_env")

        await client.get_agents()
        self.assertEqual(fake.requests[1].headers["Authorization"], "Bearer tid=session")

    async def test_without_exchange_uses_github_token(self):
        fake = FakeCopilot()
        with mock.patch.dict(os.environ, self.env, clear=True):
            client = await CopilotClient.from_env(exchange_token=False, http_client=self.http(fake))
        self.assertEqual(client.credential.token, "gho_env")
        self.assertEqual(fake.requests, [])

    async def test_with_models_prefetches_catalog(self):
        fake = FakeCopilot()
        with mock.patch.dict(os.environ, self.env, clear=True):
            client = await CopilotClient.from_env_with_models("vscode/1.90.0", http_client=self.http(fake))

        self.assertEqual(client.catalog.ids(), ["gpt-4", "gpt-3.5"])
        self.assertEqual(client.editor_version, "vscode/1.90.0")
        self.assertEqual(fake.requests[1].headers["Editor-Version"], "vscode/1.90.0")

        requests_before = len(fake.requests)
        response = await client.chat_completion([Message("user", "hi")], "gpt-3.5")
        self.assertEqual(response.content, "Use httpx.")
        self.assertEqual(len(fake.requests), requests_before + 1)

    async def test_with_models_caches_agents(self):
        fake = FakeCopilot()
        with mock.patch.dict(os.environ, self.env, clear=True):
            client = await CopilotClient.from_env_with_models(http_client=self.http(fake))

        first = await client.get_agents()
        second = await client.get_agents()
        self.assertEqual([a.id for a in first], ["github"])
        self.assertEqual(first, second)
        paths = [r.url.path for r in fake.requests]
        self.assertEqual(paths, ["/copilot_internal/v2/token", "/models", "/agents"])

    async def test_no_token_anywhere(self):
        with mock.patch.dict(os.environ, {"XDG_CONFIG_HOME": self._tmp.name}, clear=True):
            with self.assertRaises(TokenNotFoundError):
                await CopilotClient.from_env(http_client=self.http(FakeCopilot()))

    async def test_exchange_failure_is_http_error(self):
        fake = FakeCopilot(**{"/copilot_internal/v2/token": lambda r: httpx.Response(401)})
        with mock.patch.dict(os.environ, self.env, clear=True):
            with self.assertRaises(HttpError) as ctx:
                await CopilotClient.from_env(http_client=self.http(fake))
        self.assertEqual(ctx.exception.status_code, 401)

    async def test_async_context_manager(self):
        fake = FakeCopilot()
        async with self.client(fake) as client:
            await client.get_agents()
        self.assertEqual(len(fake.requests), 1)


if __name__ == "__main__":
    unittest.main()
