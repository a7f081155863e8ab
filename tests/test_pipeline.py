"""Tests for jrender.render.pipeline — evaluate, split, convert, join."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from jrender._errors import ExecutionFailure, ParseFailure
from jrender.config import JrenderConfig
from jrender.observability.collector import RenderCollector
from jrender.observability.events import RenderCompleted
from jrender.render.pipeline import RenderPipeline, join_documents, split_documents

from .conftest import Call, FakeRunner, toolchain


def _pipeline(output: object | str, **config: object) -> tuple[RenderPipeline, FakeRunner]:
    raw = output if isinstance(output, str) else json.dumps(output)
    runner = toolchain(lambda _path: raw)
    return RenderPipeline(JrenderConfig(**config), runner=runner), runner  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Document splitting
# ---------------------------------------------------------------------------


class TestSplitDocuments:

    def test_object_is_single_document(self) -> None:
        assert split_documents({"a": 1}) == [{"a": 1}]

    def test_array_is_one_document_per_element(self) -> None:
        assert split_documents([{"a": 1}, {"a": 2}, 3]) == [{"a": 1}, {"a": 2}, 3]

    def test_items_list(self) -> None:
        data = {"apiVersion": "v1", "kind": "List", "items": [{"a": 1}, {"a": 2}]}
        assert split_documents(data) == [{"a": 1}, {"a": 2}]

    def test_items_not_a_list_is_single_document(self) -> None:
        data = {"items": {"a": 1}}
        assert split_documents(data) == [data]

    def test_scalar(self) -> None:
        assert split_documents("text") == ["text"]

    def test_empty_array(self) -> None:
        assert split_documents([]) == []


class TestJoinDocuments:

    def test_single_has_no_separator(self) -> None:
        assert join_documents(["a: 1"]) == "a: 1"

    def test_separator_between_not_after(self) -> None:
        assert join_documents(["a: 1", "a: 2", "a: 3"]) == "a: 1\n---\na: 2\n---\na: 3"

    def test_custom_separator(self) -> None:
        assert join_documents(["x", "y"], "...") == "x\n...\ny"


# ---------------------------------------------------------------------------
# Full render
# ---------------------------------------------------------------------------


class TestRender:

    @pytest.mark.asyncio
    async def test_single_object(self) -> None:
        pipeline, runner = _pipeline({"a": 1, "b": "x"})
        out = await pipeline.render(Path("/w/main.jsonnet"))
        assert out == 'a: 1\nb: "x"'
        assert "---" not in out
        assert len(runner.calls_to("yq")) == 1

    @pytest.mark.asyncio
    async def test_items_list_example(self) -> None:
        pipeline, runner = _pipeline('{"items":[{"a":1},{"a":2}]}')
        out = await pipeline.render(Path("/w/main.jsonnet"))
        assert out == "a: 1\n---\na: 2"
        converted = runner.calls_to("yq")
        assert [json.loads(c.input or "") for c in converted] == [{"a": 1}, {"a": 2}]

    @pytest.mark.asyncio
    async def test_array_of_n_preserves_order(self) -> None:
        docs = [{"n": i} for i in range(5)]
        pipeline, _ = _pipeline(docs)
        out = await pipeline.render(Path("/w/main.jsonnet"))
        assert out.split("\n---\n") == [f"n: {i}" for i in range(5)]
        assert out.count("---") == 4

    @pytest.mark.asyncio
    async def test_evaluator_then_converter_invocations(self) -> None:
        pipeline, runner = _pipeline({"a": 1})
        await pipeline.render(Path("/w/main.jsonnet"))
        assert runner.calls[0] == Call("jsonnet", ("/w/main.jsonnet",), None, None)
        assert runner.calls[1].program == "yq"
        assert runner.calls[1].args == ("-P",)

    @pytest.mark.asyncio
    async def test_jpath_and_evaluator_args(self) -> None:
        pipeline, runner = _pipeline(
            {"a": 1},
            root=Path("/w"),
            jpath=(Path("vendor"),),
            evaluator_args=("--ext-str", "env=prod"),
        )
        await pipeline.render(Path("/w/main.jsonnet"))
        assert runner.calls[0].args == (
            "--ext-str", "env=prod", "-J", "/w/vendor", "/w/main.jsonnet",
        )

    @pytest.mark.asyncio
    async def test_unparseable_output(self) -> None:
        pipeline, runner = _pipeline("not json {")
        with pytest.raises(ParseFailure, match="Failed to parse JSON output from jsonnet") as info:
            await pipeline.render(Path("/w/main.jsonnet"))
        assert isinstance(info.value.__cause__, ValueError)
        assert runner.calls_to("yq") == []

    @pytest.mark.asyncio
    async def test_evaluator_failure_propagates_verbatim(self) -> None:
        def handler(call: Call) -> str:
            raise ExecutionFailure("RUNTIME ERROR: undefined field", program="jsonnet", returncode=1)

        pipeline = RenderPipeline(JrenderConfig(), runner=FakeRunner(handler))
        with pytest.raises(ExecutionFailure, match="^RUNTIME ERROR: undefined field$"):
            await pipeline.render(Path("/w/main.jsonnet"))

    @pytest.mark.asyncio
    async def test_records_render_event(self) -> None:
        collector = RenderCollector()
        runner = toolchain(lambda _p: "[1, 2]")
        pipeline = RenderPipeline(JrenderConfig(), runner=runner, collector=collector)
        await pipeline.render(Path("/w/main.jsonnet"))
        (event,) = collector.log.query(event_type=RenderCompleted)
        assert event.path == "/w/main.jsonnet"
        assert event.documents == 2
        assert event.total_ms >= event.convert_ms

    @pytest.mark.asyncio
    async def test_verbose_prints_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        pipeline, _ = _pipeline({"a": 1}, verbose=True)
        await pipeline.render(Path("/w/main.jsonnet"))
        err = capsys.readouterr().err
        assert "main.jsonnet -> 1 document (" in err
