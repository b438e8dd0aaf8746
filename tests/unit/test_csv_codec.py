"""
Unit Tests for CSV export/import

Covers both dialects: the quoting-safe standard format and the legacy
format older exports were written in.
"""

from datetime import date

from jobtracker.services import csv_codec

HEADER = (
    "Company,Position,Platform,Location,Date Applied,Status,Salary,Job URL,"
    "Contact Person,CV Version,Follow-up Date,Notes,Last Update"
)

ROUND_TRIP_FIELDS = [
    "company",
    "position",
    "platform",
    "location",
    "date_applied",
    "status",
    "salary",
    "job_url",
    "contact_person",
    "cv_version",
    "follow_up_date",
    "notes",
]


def test_header_row_in_both_dialects(make_app):
    for dialect in ("standard", "legacy"):
        text = csv_codec.encode([make_app()], dialect)
        assert text.splitlines()[0] == HEADER


def test_legacy_encode_quotes_only_notes(make_app):
    app = make_app(
        company="Acme",
        position="SRE",
        platform=None,
        location="Remote",
        date_applied=date(2024, 10, 20),
        salary="$60k-80k",
        notes='He said "call me"',
        last_update=date(2024, 10, 21),
    )
    line = csv_codec.encode([app], "legacy").splitlines()[1]
    assert line == (
        'Acme,SRE,LinkedIn,Remote,2024-10-20,Applied,$60k-80k,,,Support,,'
        '"He said ""call me""",2024-10-21'
    )


def test_legacy_decode_strips_quotes_naively(today):
    text = HEADER + "\n" + 'Acme,SRE,,Remote,2024-10-20,Applied,,,,Support,,"He said ""hi""",2024-10-21\n'
    [record] = csv_codec.decode(text, "legacy")
    assert record.company == "Acme"
    assert record.platform == "LinkedIn"
    assert record.notes == "He said hi"
    assert record.last_update == today


def test_standard_round_trip_preserves_fields(make_app):
    original = make_app(
        company="Acme, Inc.",
        position="Cloud Engineer",
        platform="Indeed",
        location="On-site - Lagos",
        date_applied=date(2026, 10, 1),
        status="Screening",
        salary="$60k-80k",
        job_url="https://example.com/jobs?id=1&ref=a",
        contact_person="Jane Doe",
        cv_version="Infrastructure",
        follow_up_date=date(2026, 10, 15),
        notes='Recruiter said "call back Monday", maybe\nsecond line',
    )
    [restored] = csv_codec.decode(csv_codec.encode([original]))

    for field in ROUND_TRIP_FIELDS:
        assert getattr(restored, field) == getattr(original, field), field
    assert restored.id != original.id


def test_decode_skips_blank_lines_and_pads_short_rows(today):
    text = HEADER + "\n\nAcme,SRE\n   \n"
    [record] = csv_codec.decode(text)
    assert record.company == "Acme"
    assert record.position == "SRE"
    assert record.platform == "LinkedIn"
    assert record.status == ""
    assert record.date_applied is None
    assert record.notes == ""
    assert record.last_update == today
    assert record.id


def test_decode_header_only_returns_nothing():
    assert csv_codec.decode(HEADER + "\n") == []
    assert csv_codec.decode("") == []


def test_decoded_records_get_distinct_ids():
    rows = "\n".join(f"Company {i},Role {i}" for i in range(20))
    records = csv_codec.decode(HEADER + "\n" + rows)
    assert len({record.id for record in records}) == 20


def test_decode_tolerates_bad_dates_and_extra_columns():
    text = HEADER + "\nAcme,SRE,Upwork,Remote,someday,Applied,,,,Custom,,notes,2024-01-01,extra,columns\n"
    [record] = csv_codec.decode(text)
    assert record.date_applied is None
    assert record.platform == "Upwork"
    assert record.notes == "notes"


def test_export_filename():
    assert csv_codec.export_filename(date(2026, 10, 19)) == "job_applications_2026-10-19.csv"


def test_standard_round_trip_keeps_surrounding_whitespace(make_app):
    original = make_app(company=" Acme ", position="SRE\t", notes="  indented\n")
    [restored] = csv_codec.decode(csv_codec.encode([original]))
    assert restored.company == " Acme "
    assert restored.position == "SRE\t"
    assert restored.notes == "  indented\n"


def test_standard_round_trip_with_very_long_notes(make_app):
    originals = [
        make_app(company="Acme, Inc.", position="SRE", notes="x" * 200_000),
        make_app(company="Beta, LLC", position="Support, Tier 2"),
    ]
    restored = csv_codec.decode(csv_codec.encode(originals))
    assert [r.company for r in restored] == ["Acme, Inc.", "Beta, LLC"]
    assert [r.position for r in restored] == ["SRE", "Support, Tier 2"]
    assert len(restored[0].notes) == 200_000
