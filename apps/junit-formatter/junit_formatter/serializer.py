"""JUnit XML rendering and the report destination."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional
import re
import xml.etree.ElementTree as ET

import structlog

from .document import ReportDocument
from .errors import ProtocolViolationError, ReportWriteError

LOGGER = structlog.get_logger("junit_formatter")

# characters XML 1.0 does not allow, e.g. ANSI escapes in colored assertion output
_XML_FORBIDDEN = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def xml_safe(value: str) -> str:
    return _XML_FORBIDDEN.sub("", value)


def to_element(document: ReportDocument) -> ET.Element:
    """Build the ``testsuite`` element of a finalized document."""

    if not document.finalized:
        raise ProtocolViolationError("Only finalized reports can be serialized")
    suite = ET.Element(
        "testsuite",
        attrib={
            "name": xml_safe(document.name or document.feature_path),
            "tests": str(document.tests),
            "failures": str(document.failures),
            "skipped": str(document.skipped),
            "time": document.time or "0",
        },
    )
    for node in document.test_cases:
        attrib = {"classname": xml_safe(node.classname), "name": xml_safe(node.name)}
        if node.time is not None:
            attrib["time"] = node.time
        case = ET.SubElement(suite, "testcase", attrib=attrib)
        outcome = node.outcome
        if outcome is None:
            continue
        marker = ET.SubElement(
            case,
            outcome.kind.value,
            attrib={"message": xml_safe(outcome.message)} if outcome.message is not None else {},
        )
        if outcome.text:
            marker.text = xml_safe(outcome.text)
    return suite


def to_xml(document: ReportDocument) -> str:
    tree = ET.ElementTree(to_element(document))
    ET.indent(tree)
    return ET.tostring(tree.getroot(), encoding="unicode")


class ReportSink:
    """Destination of one report, opened on construction and closed by the single write."""

    def __init__(self, report_path: Path) -> None:
        self.report_path = Path(report_path)
        try:
            self.report_path.parent.mkdir(parents=True, exist_ok=True)
            self._handle: Optional[BinaryIO] = self.report_path.open("wb")
        except OSError as exc:
            raise ReportWriteError(f"Cannot open report destination {self.report_path}: {exc}") from exc
        LOGGER.debug("report_sink_opened", path=str(self.report_path))

    @property
    def closed(self) -> bool:
        return self._handle is None

    def write(self, document: ReportDocument) -> None:
        if self._handle is None:
            raise ReportWriteError(f"Report destination {self.report_path} is already closed")
        handle, self._handle = self._handle, None
        try:
            tree = ET.ElementTree(to_element(document))
            ET.indent(tree)
            tree.write(handle, encoding="utf-8", xml_declaration=True)
            handle.write(b"\n")
        except (OSError, ValueError) as exc:
            raise ReportWriteError(f"Error while writing report {self.report_path}: {exc}") from exc
        finally:
            handle.close()
        LOGGER.debug("report_written", path=str(self.report_path), tests=document.tests)

    def close(self) -> None:
        """Release the destination without writing a report."""

        if self._handle is not None:
            self._handle.close()
            self._handle = None
