"""Unit tests for workflow status reporting."""

import io

from slack_approval.workflow import WorkflowStatus


def test_set_failed_writes_error_command():
    stream = io.StringIO()
    status = WorkflowStatus(stream=stream)

    status.set_failed("Approval request rejected")

    assert status.failed is True
    assert stream.getvalue() == "::error::Approval request rejected\n"


def test_set_failed_escapes_newlines():
    stream = io.StringIO()

    WorkflowStatus(stream=stream).set_failed("line one\nline two 100%")

    assert stream.getvalue() == "::error::line one%0Aline two 100%25\n"


def test_set_output_appends(tmp_path):
    output = tmp_path / "github_output"
    status = WorkflowStatus(str(output))

    status.set_output("result", "approved")
    status.set_output("approver", "U123")

    assert output.read_text() == "result=approved\napprover=U123\n"


def test_set_output_multiline(tmp_path):
    output = tmp_path / "github_output"

    WorkflowStatus(str(output)).set_output("note", "a\nb")

    lines = output.read_text().splitlines()
    assert lines[0].startswith("note<<ghadelimiter_")
    assert lines[1:3] == ["a", "b"]
    assert lines[3] == lines[0].split("<<", 1)[1]


def test_set_output_without_file_is_noop():
    status = WorkflowStatus(stream=io.StringIO())

    status.set_output("result", "approved")

    assert status.output_path is None
