from __future__ import annotations

from pathlib import Path
from typing import Iterable
import xml.etree.ElementTree as ET

import pytest

from junit_formatter.console_reporter import ConsoleReporter, summary_line
from junit_formatter.errors import ProtocolViolationError
from junit_formatter.formatter import JunitFormatter
from junit_formatter.models import (
    Background,
    ErrorInfo,
    Examples,
    Feature,
    HookResult,
    Result,
    ResultStatus,
    Scenario,
    ScenarioOutline,
    Step,
)

FEATURE_PATH = "features/payments.feature"
SECOND = 1_000_000_000


def _formatter(tmp_path: Path, reporter: ConsoleReporter, *, strict: bool = False) -> JunitFormatter:
    formatter = JunitFormatter(FEATURE_PATH, tmp_path / "TEST-payments.xml", strict=strict, reporter=reporter)
    formatter.feature(Feature(uri=FEATURE_PATH, name="Payments"))
    return formatter


def _passed(nanos: int = SECOND) -> Result:
    return Result(status=ResultStatus.PASSED, duration=nanos)


def _scenario(
    formatter: JunitFormatter,
    name: str | None,
    steps: Iterable[str] = ("a payment",),
    results: Iterable[Result] = (),
    hooks: Iterable[HookResult] = (),
    keyword: str = "Scenario",
) -> None:
    scenario = Scenario(keyword=keyword, name=name)
    formatter.scenario(scenario)
    for text in steps:
        formatter.step(Step(keyword="Given ", name=text))
    for result in results:
        formatter.result(result)
    for hook in hooks:
        formatter.after(hook)
    formatter.end_of_scenario_lifecycle(scenario)


def _suite(formatter: JunitFormatter) -> ET.Element:
    return ET.parse(formatter.report_path).getroot()


def test_passing_scenario_reports_summed_time(tmp_path: Path, plain_reporter: ConsoleReporter, capsys) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    _scenario(
        formatter,
        "List payments",
        steps=["a payment", "it is listed"],
        results=[_passed(SECOND), _passed(SECOND // 4)],
        hooks=[HookResult(status=ResultStatus.PASSED, hook="after")],
    )
    formatter.done()

    suite = _suite(formatter)
    assert suite.tag == "testsuite"
    assert suite.attrib == {"name": "Payments", "tests": "1", "failures": "0", "skipped": "0", "time": "1.25"}
    case = suite.find("testcase")
    assert case.attrib == {"classname": FEATURE_PATH, "name": "List payments", "time": "1.25"}
    assert [child.tag for child in case] == ["system-out"]
    assert "Given it is listed" in case.find("system-out").text

    assert (formatter.test_count, formatter.fail_count, formatter.skip_count) == (1, 0, 0)
    assert formatter.time_taken == pytest.approx(1.25)
    assert not formatter.is_fail
    out = capsys.readouterr().out
    assert summary_line(FEATURE_PATH, str(formatter.report_path), 1, 0, 0, 1.25) in out


def test_failed_step_with_pending_hook_is_a_failure(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    failed = Result(
        status=ResultStatus.FAILED,
        duration=SECOND,
        error=ErrorInfo(message="status 500", stack_trace="AssertionError: status 500"),
    )
    _scenario(formatter, "Create payment", results=[failed], hooks=[HookResult(status=ResultStatus.PENDING)])
    formatter.done()

    failure = _suite(formatter).find("testcase/failure")
    assert failure.attrib["message"] == "status 500"
    assert "StackTrace:\nAssertionError: status 500" in failure.text
    assert formatter.is_fail


@pytest.mark.parametrize(("strict", "marker"), [(True, "failure"), (False, "skipped")])
def test_undefined_step_depends_on_strictness(
    tmp_path: Path, plain_reporter: ConsoleReporter, strict: bool, marker: str
) -> None:
    formatter = _formatter(tmp_path, plain_reporter, strict=strict)
    _scenario(formatter, "Refund", results=[Result(status=ResultStatus.UNDEFINED)])
    formatter.done()

    case = _suite(formatter).find("testcase")
    assert [child.tag for child in case] == [marker]
    if strict:
        assert case.find("failure").attrib["message"] == "The scenario has pending or undefined step(s)"
    else:
        assert "message" not in case.find("skipped").attrib


def test_strictness_change_applies_to_later_recomputation(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    scenario = Scenario(name="Refund")
    formatter.scenario(scenario)
    formatter.step(Step(keyword="Given ", name="a refund"))
    formatter.step(Step(keyword="Then ", name="it is booked"))
    formatter.result(Result(status=ResultStatus.PENDING))
    assert formatter.document.test_cases[0].outcome.kind.value == "skipped"

    formatter.set_strict(True)
    formatter.result(_passed())
    formatter.end_of_scenario_lifecycle(scenario)
    formatter.done()

    assert _suite(formatter).find("testcase/failure") is not None


def test_outline_examples_are_numbered(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    formatter.scenario_outline(ScenarioOutline(name="Check X"))
    formatter.examples(Examples())
    for _ in range(3):
        _scenario(formatter, "Check X", results=[_passed()], keyword="Scenario Outline")
    formatter.done()

    names = [case.attrib["name"] for case in _suite(formatter).iter("testcase")]
    assert names == ["Check X (1)", "Check X (2)", "Check X (3)"]


def test_blank_names_fall_back_to_scenario_ordinal(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    _scenario(formatter, "  ", results=[_passed()])
    formatter.scenario_outline(ScenarioOutline(name=None))
    formatter.examples(Examples())
    _scenario(formatter, None, results=[_passed()], keyword="Scenario Outline")
    _scenario(formatter, "", results=[_passed()], keyword="Scenario Outline")
    formatter.scenario_outline(ScenarioOutline(name="Again"))
    formatter.examples(Examples())
    _scenario(formatter, "Again", results=[_passed()], keyword="Scenario Outline")
    _scenario(formatter, None, results=[_passed()])
    formatter.done()

    names = [case.attrib["name"] for case in _suite(formatter).iter("testcase")]
    assert names == ["1", "2 (1)", "2 (2)", "Again (1)", "4"]


def test_feature_without_scenarios_gets_placeholder(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = JunitFormatter(FEATURE_PATH, tmp_path / "empty.xml", reporter=plain_reporter)
    formatter.feature(Feature(uri=FEATURE_PATH, name="   "))
    formatter.done()

    suite = _suite(formatter)
    assert suite.attrib == {"name": FEATURE_PATH, "tests": "1", "failures": "0", "skipped": "1", "time": "0"}
    cases = suite.findall("testcase")
    assert len(cases) == 1
    assert (cases[0].attrib["classname"], cases[0].attrib["name"]) == ("dummy", "dummy")
    assert cases[0].find("skipped").attrib["message"] == "No features found"


@pytest.mark.parametrize(("strict", "marker"), [(True, "failure"), (False, "skipped")])
def test_scenario_without_steps(tmp_path: Path, plain_reporter: ConsoleReporter, strict: bool, marker: str) -> None:
    formatter = _formatter(tmp_path, plain_reporter, strict=strict)
    _scenario(formatter, "Nothing to do", steps=[])
    formatter.done()

    case = _suite(formatter).find("testcase")
    assert case.attrib["time"] == "0"
    assert [child.tag for child in case] == [marker]
    assert case.find(marker).attrib["message"] == "The scenario has no steps"


def test_repeated_results_replace_the_outcome(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    scenario = Scenario(name="Replay")
    formatter.scenario(scenario)
    formatter.step(Step(keyword="Given ", name="a payment"))
    formatter.result(_passed())
    formatter.result(_passed())
    formatter.before(HookResult(status=ResultStatus.PASSED))
    formatter.end_of_scenario_lifecycle(scenario)
    formatter.done()

    case = _suite(formatter).find("testcase")
    assert len(list(case)) == 1
    assert case.attrib["time"] == "2"


def test_steps_without_results_are_listed_as_not_executed(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    _scenario(formatter, "Never ran", steps=["a payment"])
    formatter.done()

    case = _suite(formatter).find("testcase")
    assert case.attrib["time"] == "0"
    assert case.find("system-out").text.rstrip().endswith("not executed")


def test_background_steps_are_not_listed(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    formatter.start_of_scenario_lifecycle(Scenario(name="With background"))
    formatter.background(Background())
    formatter.step(Step(keyword="Given ", name="a logged in user"))
    _scenario(formatter, "With background", steps=["a payment"], results=[_passed()])
    formatter.done()

    text = _suite(formatter).find("testcase/system-out").text
    assert "a payment" in text
    assert "logged in user" not in text


def test_summary_is_derived_from_the_tree(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    _scenario(formatter, "ok", results=[_passed(SECOND // 2)])
    _scenario(formatter, "broken", results=[Result(status=ResultStatus.FAILED, duration=SECOND)])
    _scenario(formatter, "todo", results=[Result(status=ResultStatus.PENDING)])
    formatter.document.tests = 42
    formatter.done()

    suite = _suite(formatter)
    cases = suite.findall("testcase")
    assert suite.attrib["tests"] == str(len(cases)) == "3"
    assert suite.attrib["failures"] == str(len(suite.findall("testcase/failure"))) == "1"
    assert suite.attrib["skipped"] == str(len(suite.findall("testcase/skipped"))) == "1"
    assert suite.attrib["time"] == "1.5"
    assert sum(float(case.attrib["time"]) for case in cases) == pytest.approx(1.5)


def test_result_before_scenario_is_a_protocol_violation(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    with pytest.raises(ProtocolViolationError):
        formatter.result(_passed())
    formatter.close()


def test_outline_example_requires_outline_and_examples(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    with pytest.raises(ProtocolViolationError):
        formatter.scenario(Scenario(keyword="Scenario Outline", name="Check X"))
    formatter.scenario_outline(ScenarioOutline(name="Check X"))
    with pytest.raises(ProtocolViolationError):
        formatter.scenario(Scenario(keyword="Scenario Outline", name="Check X"))
    formatter.close()


def test_done_is_accepted_once(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    formatter.done()
    with pytest.raises(ProtocolViolationError):
        formatter.done()


def test_done_during_scenario_is_rejected(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    formatter.scenario(Scenario(name="open"))
    with pytest.raises(ProtocolViolationError):
        formatter.done()
    formatter.close()


def test_control_characters_are_dropped_from_the_report(tmp_path: Path, plain_reporter: ConsoleReporter) -> None:
    formatter = _formatter(tmp_path, plain_reporter)
    colored = Result(
        status=ResultStatus.FAILED,
        duration=SECOND,
        error=ErrorInfo(message="\x1b[31mred\x1b[0m", stack_trace="\x1b[31mboom\x0c\ufffe\tat step"),
    )
    _scenario(formatter, "Colored\x07 output", results=[colored])
    formatter.done()

    case = _suite(formatter).find("testcase")
    failure = case.find("failure")
    assert case.attrib["name"] == "Colored output"
    assert failure.attrib["message"] == "[31mred[0m"
    assert failure.text.endswith("StackTrace:\n[31mboom\tat step")
