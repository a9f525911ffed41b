import csv
import io
import json

from adapters.csv_exporter import CSV_HEADER, export_records_csv
from adapters.input_reader import parse_subscription_lines, read_subscription_ids
from adapters.json_exporter import export_report_json
from core.domain.models import (
    LookupReport,
    OutcomeRecord,
    ResolutionError,
    ResolutionErrorKind,
    TenantMetadata,
    ValidationRejection,
)

from conftest import SUB_1, SUB_2, TENANT_A


def _report():
    return LookupReport(
        records=[
            OutcomeRecord(
                subscription_id=SUB_1,
                tenant_id=TENANT_A,
                metadata=TenantMetadata(display_name="Contoso, Ltd", default_domain_name="contoso.com"),
            ),
            OutcomeRecord(
                subscription_id=SUB_2,
                error=ResolutionError(kind=ResolutionErrorKind.NOT_FOUND, status_code=404),
            ),
        ],
        rejections=[ValidationRejection(raw="nope", reason="not a canonical GUID")],
        elapsed_seconds=0.5,
        enriched=True,
    )


def test_csv_export_writes_header_and_sentinel(tmp_path):
    out = export_records_csv(records=_report().records, output_path=tmp_path / "out" / "tenants.csv")

    rows = list(csv.reader(out.open(encoding="utf-8", newline="")))
    assert tuple(rows[0]) == CSV_HEADER
    assert rows[1] == [SUB_1, TENANT_A, "Contoso, Ltd", "contoso.com"]
    assert rows[2] == [SUB_2, "NOT_FOUND", "", ""]


def test_json_export_includes_errors_rejections_and_summary(tmp_path):
    out = export_report_json(report=_report(), output_path=tmp_path / "report.json")

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["summary"] == {"total": 2, "resolved": 1, "errored": 1, "rejected": 1}
    assert payload["records"][1]["error"]["kind"] == "not_found"
    assert payload["records"][0]["metadata"]["display_name"] == "Contoso, Ltd"
    assert payload["rejections"][0]["raw"] == "nope"


def test_parse_plain_lines_skips_comments_and_blanks():
    text = f"# my subs\n{SUB_1}\n\n   {SUB_2}  \n"
    assert parse_subscription_lines(text) == [SUB_1, SUB_2]


def test_parse_csv_with_subscription_column():
    text = f"Name,SubscriptionId,State\nprod,{SUB_1},Enabled\ndev,{SUB_2},Disabled\n"
    assert parse_subscription_lines(text) == [SUB_1, SUB_2]


def test_parse_csv_export_roundtrip_reads_first_column(tmp_path):
    out = export_records_csv(records=_report().records, output_path=tmp_path / "prev.csv")
    assert read_subscription_ids(out) == [SUB_1, SUB_2]


def test_read_from_stdin_dash():
    assert read_subscription_ids("-", stdin=io.StringIO(f"{SUB_1}\n")) == [SUB_1]
