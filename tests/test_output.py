import io
import json

import pytest

from portprobe.models import NO_RESPONSE, ScanReport, ScanResult
from portprobe.output import format_row, print_summary, render_json, to_record


def test_record_omits_banner_when_absent():
    assert to_record(ScanResult("h", 1, open=False)) == {"target": "h", "port": 1, "success": False}
    assert to_record(ScanResult("h", 22, open=True, banner=NO_RESPONSE)) == {
        "target": "h",
        "port": 22,
        "success": True,
        "banner": NO_RESPONSE,
    }


def test_render_json_lists_open_results():
    report = ScanReport(
        total=10,
        elapsed_s=1.5,
        open_results=[
            ScanResult("10.0.0.1", 22, open=True, banner="SSH-2.0-OpenSSH_9.6\r\n"),
            ScanResult("10.0.0.1", 80, open=True, banner=NO_RESPONSE),
        ],
    )
    data = json.loads(render_json(report))
    assert data == [
        {"target": "10.0.0.1", "port": 22, "success": True, "banner": "SSH-2.0-OpenSSH_9.6\r\n"},
        {"target": "10.0.0.1", "port": 80, "success": True, "banner": "No response"},
    ]


def test_render_json_empty_report():
    assert json.loads(render_json(ScanReport(total=3, elapsed_s=0.1))) == []


def test_render_json_raises_on_unserializable_banner():
    report = ScanReport(total=1, elapsed_s=0.0, open_results=[ScanResult("h", 1, open=True, banner=object())])
    with pytest.raises(TypeError):
        render_json(report)


def test_format_row_cleans_banner():
    row = format_row(ScanResult("h", 25, open=True, banner="220 mail\r\n\x00ESMTP\r\n"))
    assert row == "Target: h | Port 25: open | Banner: 220 mail ESMTP"


def test_summary_lists_counts_and_sorted_rows():
    report = ScanReport(
        total=202,
        elapsed_s=2.0,
        open_results=[
            ScanResult("b", 80, open=True, banner=NO_RESPONSE),
            ScanResult("a", 443, open=True, banner=NO_RESPONSE),
        ],
    )
    buf = io.StringIO()
    print_summary(report, targets="a,b", out=buf)
    text = buf.getvalue()
    assert "Scan Summary:" in text
    assert "Targets: a,b" in text
    assert "Total ports scanned: 202" in text
    assert "Open ports: 2" in text
    assert "Scan completed in: 2.000s" in text
    assert text.index("Target: a | Port 443") < text.index("Target: b | Port 80")


def test_format_row_flags_local_errors():
    assert format_row(ScanResult("h", 9, open=False, attempts=0)) == "Target: h | Port 9: error | Banner: null"
    assert format_row(ScanResult("h", 9, open=False, attempts=2)) == "Target: h | Port 9: closed | Banner: null"
