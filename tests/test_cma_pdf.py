"""
Tests for CMA PDF generation and the reporting CLI

Verifies:
- PDF output is a valid, deterministic document
- File naming and output directory handling
- CLI exit codes for good and bad input
"""

import json
import pytest
from datetime import datetime, timezone
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.cma import CMAGenerator
from core.comp_engine import Condition, ListingStatus, Property, ReferenceProperty
from core.storage import InMemoryPropertyStore
from reporting import CMAReportGenerator, generate_cma_pdf, report_filename
from reporting.cma_pdf import confidence_note
from reporting.cli import main as cli_main


FIXED_TIME = datetime(2024, 6, 1, 12, 30, 0, tzinfo=timezone.utc)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def report():
    store = InMemoryPropertyStore([
        Property(id=f"c{i}", city="Naples", price=480000 + i * 15000, bedrooms=3,
                 square_feet=1900 + i * 40, address=f"{i} Bay & Gulf Rd",
                 status=ListingStatus.SOLD if i % 2 else ListingStatus.ACTIVE)
        for i in range(12)
    ])
    subject = ReferenceProperty(
        city="Naples",
        bedrooms=3,
        square_feet=2000,
        address="123 Palm Ave <Unit 4>",
        state="FL",
        pool=True,
        condition=Condition.EXCELLENT,
    )
    return CMAGenerator(store, clock=lambda: FIXED_TIME).generate(subject)


@pytest.fixture
def properties_file(tmp_path):
    path = tmp_path / "properties.json"
    path.write_text(json.dumps({"properties": [
        {"id": "c1", "city": "Naples", "price": 500000, "bedrooms": 3, "square_feet": 2000},
        {"id": "c2", "city": "Naples", "price": 520000, "bedrooms": 3, "square_feet": 2100,
         "status": "sold"},
    ]}))
    return path


@pytest.fixture
def subject_file(tmp_path):
    path = tmp_path / "subject.json"
    path.write_text(json.dumps({
        "address": "123 Palm Ave",
        "city": "Naples",
        "bedrooms": 3,
        "square_feet": 2000,
    }))
    return path


# =============================================================================
# Test: PDF Output
# =============================================================================

class TestCMAReportGenerator:

    def test_generates_pdf_bytes(self, report):
        pdf = CMAReportGenerator().generate_to_buffer(report)

        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_deterministic(self, report):
        generator = CMAReportGenerator()

        assert generator.generate_to_buffer(report) == generator.generate_to_buffer(report)

    def test_confidence_note_counts_pool(self):
        store = InMemoryPropertyStore([
            Property(id=f"c{i}", city="Naples", price=500000, bedrooms=3, square_feet=2000)
            for i in range(3)
        ])
        subject = ReferenceProperty(city="Naples", bedrooms=3, square_feet=2000)
        single = CMAGenerator(store, clock=lambda: FIXED_TIME).generate(subject, limit=1)

        note = confidence_note(single)

        assert len(single.comparables) == 1
        assert "<b>High</b>" in note
        assert "based on 3 comparable properties" in note

    def test_filename(self, report):
        assert report_filename(report) == "CMA-Naples-20240601123000.pdf"

    def test_writes_to_output_dir(self, report, tmp_path):
        result = generate_cma_pdf(report, output_dir=tmp_path / "out")

        assert result.path == tmp_path / "out" / "CMA-Naples-20240601123000.pdf"
        assert result.path.read_bytes().startswith(b"%PDF")
        assert result.comparables_included == 10

    def test_no_comparables(self, tmp_path):
        subject = ReferenceProperty(city="Fort Myers", bedrooms=2, square_feet=1200)
        empty = CMAGenerator(InMemoryPropertyStore(), clock=lambda: FIXED_TIME).generate(subject)

        result = generate_cma_pdf(empty, output_dir=tmp_path)

        assert result.comparables_included == 0
        assert result.path.name == "CMA-FortMyers-20240601123000.pdf"


# =============================================================================
# Test: CLI
# =============================================================================

class TestCLI:

    def test_pdf(self, subject_file, properties_file, tmp_path, capsys):
        code = cli_main([
            "cma", str(subject_file),
            "--store", str(properties_file),
            "--output-dir", str(tmp_path / "reports"),
        ])

        assert code == 0
        assert "Report generated" in capsys.readouterr().out
        assert len(list((tmp_path / "reports").glob("CMA-Naples-*.pdf"))) == 1

    def test_json(self, subject_file, properties_file, capsys):
        code = cli_main(["cma", str(subject_file), "--store", str(properties_file), "--json"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["valuation"]["mid"] == 500000
        assert {c["id"] for c in data["comparables"]} == {"c1", "c2"}

    def test_exclude_sold(self, subject_file, properties_file, capsys):
        cli_main(["cma", str(subject_file), "--store", str(properties_file), "--json", "--exclude-sold"])

        data = json.loads(capsys.readouterr().out)
        assert [c["id"] for c in data["comparables"]] == ["c1"]

    def test_missing_subject_file(self, properties_file, tmp_path):
        code = cli_main(["cma", str(tmp_path / "nope.json"), "--store", str(properties_file)])

        assert code == 1

    def test_invalid_subject(self, properties_file, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"city": "Naples", "bedrooms": 3}))

        assert cli_main(["cma", str(bad), "--store", str(properties_file)]) == 1

    def test_missing_store(self, subject_file, tmp_path):
        assert cli_main(["cma", str(subject_file), "--store", str(tmp_path / "none.json")]) == 1
