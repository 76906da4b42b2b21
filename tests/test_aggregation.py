import pytest

from coursehub.services.aggregation_service import aggregate, approval_rate


def test_empty_aggregate_has_no_division_error() -> None:
    summary = aggregate([])

    assert summary.total == 0
    assert summary.pending == 0
    assert summary.approved == 0
    assert summary.rejected == 0
    assert summary.per_institution == []


def test_counts_overall_and_per_institution() -> None:
    applications = [
        {"institution_id": "I2", "status": "pending"},
        {"institution_id": "I1", "status": "approved"},
        {"institution_id": "I1", "status": "rejected"},
        {"institution_id": "I1", "status": "pending"},
        {"institution_id": "I1", "status": "approved"},
        {"institution_id": "I2", "status": "under_review"},
        {"institution_id": "I2", "status": "admitted"},
    ]

    summary = aggregate(applications)

    assert (summary.total, summary.pending, summary.approved, summary.rejected) == (7, 2, 2, 1)
    assert summary.under_review == 1
    assert summary.admitted == 1
    assert [i.institution_id for i in summary.per_institution] == ["I1", "I2"]

    i1, i2 = summary.per_institution
    assert (i1.total, i1.pending, i1.approved, i1.rejected) == (4, 1, 2, 1)
    assert i1.approval_rate == pytest.approx(0.5)
    assert i2.total == 3
    assert i2.approval_rate == 0.0


def test_aggregate_is_recomputed_not_accumulated() -> None:
    applications = [{"institution_id": "I1", "status": "approved"}]

    first = aggregate(applications)
    applications.append({"institution_id": "I1", "status": "rejected"})
    second = aggregate(applications)

    assert first.total == 1
    assert second.total == 2
    assert second.per_institution[0].approval_rate == pytest.approx(0.5)


def test_approval_rate_zero_total() -> None:
    assert approval_rate(0, 0) == 0.0
    assert approval_rate(1, 4) == 0.25


def test_documents_without_institution_are_skipped() -> None:
    summary = aggregate([
        {"institution_id": "I1", "status": "pending"},
        {"status": "approved"},
        {"institution_id": None, "status": "rejected"},
    ])

    assert summary.total == 1
    assert (summary.approved, summary.rejected) == (0, 0)
    assert [i.institution_id for i in summary.per_institution] == ["I1"]
