from __future__ import annotations

from pathlib import Path

import pytest

from internship_compliance import config

INTERNSHIPS_CSV = """Student ID,Institution ID,Start Date,End Date,Mentor Assigned,Joining Letter Uploaded,Status
S1,INST-A,2025-01-15,2025-05-08,yes,yes,active
S2,INST-A,2025-01-22,2025-05-20,no,yes,active
S3,INST-B,2025-02-01,2025-06-30,no,no,active
S4,INST-B,2025-02-01,2025-06-30,yes,no,completed
S5,INST-C,2025-01-01,2025-04-30,yes,yes,completed
"""

REPORTS_CSV = """student_id,year,month,status,submitted_at
S1,2025,1,APPROVED,2025-02-08 10:00
S1,2025,2,DRAFT,
S2,2025,2,SUBMITTED,2025-03-04 09:00
"""

VISITS_CSV = """student_id,visit_date
S1,2025-01-20
S1,2025-02-27
S3,2025-02-15
"""


@pytest.fixture
def raw_dir(tmp_path: Path) -> Path:
    base = tmp_path / "raw"
    base.mkdir()
    (base / "Internships.csv").write_text(INTERNSHIPS_CSV)
    (base / "Reports.csv").write_text(REPORTS_CSV)
    (base / "Visits.csv").write_text(VISITS_CSV)
    return base


@pytest.fixture
def output_dirs(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.setattr(config, "PROCESSED_DIR", tmp_path / "processed")
    monkeypatch.setattr(config, "REPORTS_DIR", tmp_path / "reports")
    return tmp_path
