from __future__ import annotations

import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Callable

import httpx

from agents.field_generation_agent import FieldGenerationAgent
from agents.llm_client import ChatCompletionsClient, extract_generated_text, match_response_shape
from agents.prompts import SYSTEM_PROMPT
from app_logging.run_logger import RunLogger
from lib.errors import ExtractionError, ParseError, TransportError, ValidationError
from lib.model_resolver import ModelResolver
from lib.settings import DEFAULT_MODEL, PLACEHOLDER_API_KEY, PLACEHOLDER_ENDPOINT, BriefDeskSettings
from schemas.generation import ChatCompletion, DataArray, GenerationContext, ResultField, TextCompletion


ENDPOINT = "https://llm.example.test/v1/chat/completions"
API_KEY = "sk-test-123"


class TestExtraction(unittest.TestCase):
    def test_known_shapes(self) -> None:
        self.assertEqual(extract_generated_text({"choices": [{"message": {"content": "Hello"}}]}), "Hello")
        self.assertEqual(extract_generated_text({"choices": [{"text": "World "}]}), "World")
        self.assertEqual(extract_generated_text({"data": [{"content": "X"}]}), "X")
        self.assertEqual(extract_generated_text({"result": "  R\n"}), "R")

    def test_empty_object_raises(self) -> None:
        with self.assertRaises(ExtractionError):
            extract_generated_text({})

    def test_non_object_payloads_raise(self) -> None:
        for payload in ([], "text", 3, None, {"choices": []}, {"data": "nope"}):
            with self.assertRaises(ExtractionError):
                extract_generated_text(payload)

    def test_priority_order(self) -> None:
        payload = {
            "choices": [{"message": {"content": "chat"}, "text": "text"}],
            "data": [{"content": "data"}],
            "result": "result",
        }
        self.assertIsInstance(match_response_shape(payload), ChatCompletion)
        self.assertIsInstance(match_response_shape({"choices": [{"text": "t"}], "result": "r"}), TextCompletion)
        self.assertIsInstance(match_response_shape({"data": [{"content": "d"}], "result": "r"}), DataArray)
        self.assertIsInstance(match_response_shape({"result": "r"}), ResultField)

    def test_blank_or_mistyped_content_falls_through(self) -> None:
        self.assertEqual(
            extract_generated_text({"choices": [{"message": {"content": ""}}], "result": "fallback"}),
            "fallback",
        )
        self.assertEqual(
            extract_generated_text({"choices": [{"message": {"content": None}}], "data": [{"content": "d"}]}),
            "d",
        )

    def test_only_first_choice_is_inspected(self) -> None:
        payload = {"choices": [{"message": {"content": "first"}}, 42, {"unexpected": True}]}
        self.assertEqual(extract_generated_text(payload), "first")


class _Recorder:
    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


class TestFieldGenerationAgent(unittest.TestCase):
    def setUp(self) -> None:
        self._td = TemporaryDirectory()
        self.root = Path(self._td.name)

    def tearDown(self) -> None:
        self._td.cleanup()

    def _settings(self, **overrides) -> BriefDeskSettings:
        data = {
            "endpoint": ENDPOINT,
            "api_key": API_KEY,
            "model_defaults_path": self.root / "model_defaults.yaml",
            "run_log_path": self.root / "run_log.jsonl",
        }
        data.update(overrides)
        return BriefDeskSettings(**data)

    def _agent(self, recorder: _Recorder, settings: BriefDeskSettings | None = None, **kwargs) -> FieldGenerationAgent:
        s = settings or self._settings()
        client = ChatCompletionsClient(
            endpoint=s.endpoint,
            api_key=s.api_key,
            http_client=httpx.Client(transport=httpx.MockTransport(recorder)),
        )
        return FieldGenerationAgent(settings=s, resolver=ModelResolver(settings=s), client=client, **kwargs)

    def test_request_shape_and_trimmed_result(self) -> None:
        rec = _Recorder(lambda r: httpx.Response(200, json={"choices": [{"message": {"content": "  Title here \n"}}]}))
        agent = self._agent(rec)

        text = agent.generate("seo_title", "hiking boots", GenerationContext(main_keyword="hiking boots"))

        self.assertEqual(text, "Title here")
        self.assertEqual(len(rec.requests), 1)
        req = rec.requests[0]
        self.assertEqual(req.method, "POST")
        self.assertEqual(str(req.url), ENDPOINT)
        self.assertEqual(req.headers["authorization"], f"Bearer {API_KEY}")
        self.assertEqual(req.headers["content-type"], "application/json")

        body = json.loads(req.content)
        self.assertEqual(body["model"], DEFAULT_MODEL)
        self.assertEqual(body["max_tokens"], 800)
        self.assertIs(body["stream"], False)
        self.assertEqual([m["role"] for m in body["messages"]], ["system", "user"])
        self.assertEqual(body["messages"][0]["content"], SYSTEM_PROMPT)
        self.assertIn("hiking boots", body["messages"][1]["content"])
        self.assertIn("60 characters", body["messages"][1]["content"])

    def test_model_override_is_sent(self) -> None:
        rec = _Recorder(lambda r: httpx.Response(200, json={"result": "ok"}))
        agent = self._agent(rec, settings=self._settings(default_model="settings-model"))

        agent.generate("faq", "topic", GenerationContext(model_override="gpt-x"))

        self.assertEqual(json.loads(rec.requests[0].content)["model"], "gpt-x")

    def test_validation_happens_before_any_network_call(self) -> None:
        cases = [
            (self._settings(), "", "topic"),
            (self._settings(), "faq", "   "),
            (self._settings(endpoint=""), "faq", "topic"),
            (self._settings(endpoint=PLACEHOLDER_ENDPOINT), "faq", "topic"),
            (self._settings(api_key=""), "faq", "topic"),
            (self._settings(api_key=PLACEHOLDER_API_KEY), "faq", "topic"),
        ]
        for settings, field_id, topic in cases:
            rec = _Recorder(lambda r: httpx.Response(200, json={"result": "should not happen"}))
            agent = self._agent(rec, settings=settings)
            with self.assertRaises(ValidationError):
                agent.generate(field_id, topic)
            self.assertEqual(rec.requests, [])

    def test_validation_error_is_a_value_error(self) -> None:
        agent = FieldGenerationAgent(settings=self._settings(endpoint=PLACEHOLDER_ENDPOINT))
        with self.assertRaises(ValueError):
            agent.generate("faq", "topic")

    def test_non_2xx_carries_status_and_raw_body(self) -> None:
        rec = _Recorder(lambda r: httpx.Response(429, text='{"error": "rate limited"}'))
        agent = self._agent(rec)

        with self.assertRaises(TransportError) as ctx:
            agent.generate("faq", "topic")

        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(ctx.exception.body, '{"error": "rate limited"}')
        self.assertEqual(len(rec.requests), 1)

    def test_network_failure_is_transport_error_without_status(self) -> None:
        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        agent = self._agent(_Recorder(boom))

        with self.assertRaises(TransportError) as ctx:
            agent.generate("faq", "topic")
        self.assertIsNone(ctx.exception.status_code)
        self.assertIsNone(ctx.exception.body)

    def test_malformed_json_is_parse_error(self) -> None:
        agent = self._agent(_Recorder(lambda r: httpx.Response(200, text="<html>oops</html>")))

        with self.assertRaises(ParseError) as ctx:
            agent.generate("faq", "topic")
        self.assertEqual(ctx.exception.body, "<html>oops</html>")

    def test_unknown_shape_is_extraction_error(self) -> None:
        agent = self._agent(_Recorder(lambda r: httpx.Response(200, json={})))

        with self.assertRaises(ExtractionError):
            agent.generate("faq", "topic")

    def test_run_dict_interface(self) -> None:
        rec = _Recorder(lambda r: httpx.Response(200, json={"data": [{"content": "X"}]}))
        agent = self._agent(rec)

        out = agent.run({"field_id": "keywords", "topic": "trail running", "context": {"model_override": "m-1"}})

        self.assertEqual(out, {"field_id": "keywords", "model": "m-1", "text": "X"})

    def test_run_log_records_success_and_failure_without_secrets(self) -> None:
        settings = self._settings()
        responses = iter([
            httpx.Response(200, json={"result": "fine"}),
            httpx.Response(500, text="server error"),
        ])
        rec = _Recorder(lambda r: next(responses))
        agent = self._agent(rec, settings=settings, run_logger=RunLogger(log_path=settings.run_log_path))

        agent.generate("faq", "topic one")
        with self.assertRaises(TransportError):
            agent.generate("faq", "topic two")

        raw = settings.run_log_path.read_text(encoding="utf-8")
        events = [json.loads(line) for line in raw.splitlines()]
        self.assertEqual([e["event"] for e in events], ["start", "end", "start", "error"])
        self.assertEqual(events[0]["brief_title"], "topic one")
        self.assertEqual(events[1]["output"]["text"], "fine")
        self.assertEqual(events[3]["error"]["type"], "TransportError")
        self.assertEqual(events[3]["error"]["status_code"], 500)
        self.assertNotIn(API_KEY, raw)


if __name__ == "__main__":
    unittest.main()
