"""Tests for edit orchestration."""

import asyncio

import pytest

from photo_studio.domain.hotspot import Hotspot
from photo_studio.domain.images import ImageSize
from photo_studio.domain.sessions import Workspace
from photo_studio.domain.tools import Tool
from photo_studio.services.editing import EditOrchestrator, EditOutcome
from photo_studio.services.generation import EditFailure
from tests.conftest import FakeGenerativeEditor, make_original


def _prepare_retouch(
    workspace: Workspace, instruction: str = "remove the bird"
) -> None:
    session = workspace.session
    assert session is not None
    session.select_tool(Tool.RETOUCH)
    session.capture_hotspot(
        250, 100, rendered=ImageSize(1000, 500), natural=ImageSize(2000, 1000)
    )
    session.set_retouch_instruction(instruction)


def test_adjustment_appends_version(
    workspace: Workspace,
    orchestrator: EditOrchestrator,
    editor: FakeGenerativeEditor,
) -> None:
    session = workspace.session
    assert session is not None
    session.select_tool(Tool.ADJUST)

    outcome = asyncio.run(orchestrator.apply_adjustment(workspace, "warmer light"))

    assert outcome is EditOutcome.APPLIED
    assert len(session.versions) == 2
    assert session.versions.cursor == 1
    assert session.active_tool is None
    assert session.is_busy is False
    assert editor.calls[0].kind == "adjust"
    assert editor.calls[0].instruction == "warmer light"


def test_edit_uses_current_version_and_original_name(
    workspace: Workspace,
    orchestrator: EditOrchestrator,
    editor: FakeGenerativeEditor,
) -> None:
    session = workspace.session
    assert session is not None

    asyncio.run(orchestrator.apply_filter(workspace, "synthwave"))
    asyncio.run(orchestrator.apply_filter(workspace, "anime"))

    assert editor.calls[1].image.data == session.versions.versions[1].data
    assert editor.calls[1].image.file_name == "photo.png"


def test_edit_after_undo_prunes_future(
    workspace: Workspace, orchestrator: EditOrchestrator
) -> None:
    session = workspace.session
    assert session is not None

    asyncio.run(orchestrator.apply_adjustment(workspace, "brighter"))
    asyncio.run(orchestrator.apply_adjustment(workspace, "sharper"))
    v0, v1, _ = session.versions.versions
    session.undo()
    asyncio.run(orchestrator.apply_filter(workspace, "noir"))

    versions = session.versions.versions
    assert len(versions) == 3
    assert versions[0] is v0
    assert versions[1] is v1
    assert versions[2].data.endswith(b"v3")
    assert session.versions.cursor == 2


def test_failed_edit_keeps_history_and_reports_error(
    workspace: Workspace,
    orchestrator: EditOrchestrator,
    editor: FakeGenerativeEditor,
) -> None:
    session = workspace.session
    assert session is not None
    editor.error = EditFailure("Request was blocked by the safety system.")

    outcome = asyncio.run(orchestrator.apply_adjustment(workspace, "brighter"))

    assert outcome is EditOutcome.FAILED
    assert len(session.versions) == 1
    assert session.versions.cursor == 0
    assert session.is_busy is False
    assert session.last_error == "Request was blocked by the safety system."


def test_failure_without_message_uses_fallback(
    workspace: Workspace,
    orchestrator: EditOrchestrator,
    editor: FakeGenerativeEditor,
) -> None:
    session = workspace.session
    assert session is not None
    editor.error = RuntimeError()

    asyncio.run(orchestrator.apply_filter(workspace, "vintage"))

    assert session.last_error == "An unknown error occurred during filtering."


def test_debug_errors_include_exception_type(
    workspace: Workspace, editor: FakeGenerativeEditor
) -> None:
    session = workspace.session
    assert session is not None
    editor.error = TimeoutError("backend timed out")
    orchestrator = EditOrchestrator(editor=editor, debug_errors=True)

    asyncio.run(orchestrator.apply_adjustment(workspace, "brighter"))

    assert session.last_error == "backend timed out (debug: TimeoutError)"


def test_successful_edit_clears_previous_error(
    workspace: Workspace,
    orchestrator: EditOrchestrator,
    editor: FakeGenerativeEditor,
) -> None:
    session = workspace.session
    assert session is not None
    editor.error = EditFailure("nope")
    asyncio.run(orchestrator.apply_adjustment(workspace, "brighter"))
    editor.error = None

    asyncio.run(orchestrator.apply_adjustment(workspace, "brighter"))

    assert session.last_error is None
    assert len(session.versions) == 2


def test_blank_instruction_is_skipped(
    workspace: Workspace,
    orchestrator: EditOrchestrator,
    editor: FakeGenerativeEditor,
) -> None:
    outcome = asyncio.run(orchestrator.apply_filter(workspace, "   "))

    assert outcome is EditOutcome.SKIPPED
    assert editor.calls == []


def test_edit_without_image_is_skipped(orchestrator: EditOrchestrator) -> None:
    outcome = asyncio.run(orchestrator.apply_adjustment(Workspace(), "brighter"))

    assert outcome is EditOutcome.SKIPPED


def test_retouch_sends_hotspot_and_consumes_it(
    workspace: Workspace,
    orchestrator: EditOrchestrator,
    editor: FakeGenerativeEditor,
) -> None:
    session = workspace.session
    assert session is not None
    _prepare_retouch(workspace)

    outcome = asyncio.run(orchestrator.apply_retouch(workspace))

    assert outcome is EditOutcome.APPLIED
    assert editor.calls[0].hotspot == Hotspot(x=500, y=200)
    assert editor.calls[0].instruction == "remove the bird"
    assert session.pending_hotspot is None
    assert session.retouch_instruction == ""


def test_failed_retouch_still_consumes_hotspot(
    workspace: Workspace,
    orchestrator: EditOrchestrator,
    editor: FakeGenerativeEditor,
) -> None:
    session = workspace.session
    assert session is not None
    _prepare_retouch(workspace)
    editor.error = EditFailure("no image returned")

    outcome = asyncio.run(orchestrator.apply_retouch(workspace))

    assert outcome is EditOutcome.FAILED
    assert session.pending_hotspot is None
    assert session.retouch_instruction == ""
    assert session.active_tool is Tool.RETOUCH
    assert len(session.versions) == 1


def test_cancelled_retouch_consumes_hotspot_and_instruction(
    workspace: Workspace, editor: FakeGenerativeEditor
) -> None:
    orchestrator = EditOrchestrator(editor=editor)
    session = workspace.session
    assert session is not None
    _prepare_retouch(workspace, instruction="remove bird")

    async def scenario() -> None:
        editor.gate = asyncio.Event()
        task = asyncio.create_task(orchestrator.apply_retouch(workspace))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert session.pending_hotspot is None
    assert session.retouch_instruction == ""
    assert session.is_busy is False
    assert session.last_error == "The edit request was cancelled."
    assert len(session.versions) == 1


def test_retouch_without_hotspot_is_noop(
    workspace: Workspace,
    orchestrator: EditOrchestrator,
    editor: FakeGenerativeEditor,
) -> None:
    session = workspace.session
    assert session is not None
    session.select_tool(Tool.RETOUCH)
    session.set_retouch_instruction("add a hat")
    session.last_error = "previous"

    outcome = asyncio.run(orchestrator.apply_retouch(workspace))

    assert outcome is EditOutcome.SKIPPED
    assert editor.calls == []
    assert len(session.versions) == 1
    assert session.versions.cursor == 0
    assert session.last_error == "previous"
    assert session.retouch_instruction == "add a hat"


def test_retouch_without_instruction_is_noop(
    workspace: Workspace,
    orchestrator: EditOrchestrator,
    editor: FakeGenerativeEditor,
) -> None:
    _prepare_retouch(workspace, instruction=" ")

    outcome = asyncio.run(orchestrator.apply_retouch(workspace))

    assert outcome is EditOutcome.SKIPPED
    assert editor.calls == []


def test_second_request_rejected_while_busy(workspace: Workspace) -> None:
    editor = FakeGenerativeEditor()
    orchestrator = EditOrchestrator(editor=editor)
    session = workspace.session
    assert session is not None

    async def scenario() -> tuple[EditOutcome, EditOutcome, bool]:
        editor.gate = asyncio.Event()
        first = asyncio.create_task(orchestrator.apply_adjustment(workspace, "a"))
        await asyncio.sleep(0)
        busy = session.is_busy
        second = await orchestrator.apply_filter(workspace, "b")
        editor.gate.set()
        return await first, second, busy

    first, second, busy = asyncio.run(scenario())

    assert busy is True
    assert first is EditOutcome.APPLIED
    assert second is EditOutcome.SKIPPED
    assert len(editor.calls) == 1
    assert len(session.versions) == 2


def test_response_after_new_image_is_discarded(workspace: Workspace) -> None:
    editor = FakeGenerativeEditor()
    orchestrator = EditOrchestrator(editor=editor)

    async def scenario() -> EditOutcome:
        editor.gate = asyncio.Event()
        task = asyncio.create_task(orchestrator.apply_adjustment(workspace, "a"))
        await asyncio.sleep(0)
        workspace.load(make_original("second.png"))
        editor.gate.set()
        return await task

    outcome = asyncio.run(scenario())

    assert outcome is EditOutcome.DISCARDED
    session = workspace.session
    assert session is not None
    assert len(session.versions) == 1
    assert session.is_busy is False
    assert session.original.file_name == "second.png"


def test_failure_after_close_is_discarded(workspace: Workspace) -> None:
    editor = FakeGenerativeEditor(error=EditFailure("late failure"))
    orchestrator = EditOrchestrator(editor=editor)

    async def scenario() -> EditOutcome:
        editor.gate = asyncio.Event()
        task = asyncio.create_task(orchestrator.apply_filter(workspace, "a"))
        await asyncio.sleep(0)
        workspace.close()
        editor.gate.set()
        return await task

    assert asyncio.run(scenario()) is EditOutcome.DISCARDED
    assert workspace.session is None
