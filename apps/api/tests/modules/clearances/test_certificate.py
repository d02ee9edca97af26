"""
Unit tests for certificate rendering.
"""

from datetime import UTC, datetime

import pytest

from app.modules.clearances.certificate import CertificateSnapshot, ordinal, render_certificate


@pytest.mark.parametrize(
    "number,expected",
    [
        (1, "1st"),
        (2, "2nd"),
        (3, "3rd"),
        (4, "4th"),
        (11, "11th"),
        (12, "12th"),
        (22, "22nd"),
    ],
)
def test_ordinal(number, expected):
    assert ordinal(number) == expected


class TestRenderCertificate:
    """Tests for render_certificate()."""

    def test_renders_pdf(self):
        snapshot = CertificateSnapshot(
            student_name="Abebe Kebede",
            student_number="ETS0123/14",
            department="Software Engineering",
            year_level=4,
            completed_at=datetime(2026, 6, 30, tzinfo=UTC),
        )

        document = render_certificate(snapshot)

        assert isinstance(document, bytes)
        assert document.startswith(b"%PDF")

    def test_renders_without_optional_fields(self):
        snapshot = CertificateSnapshot(
            student_name="Sara Tesfaye",
            student_number=None,
            department=None,
            year_level=None,
            completed_at=datetime(2026, 6, 30, tzinfo=UTC),
        )

        assert render_certificate(snapshot).startswith(b"%PDF")
