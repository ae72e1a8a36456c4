from toplogs.models.data_models import Bucket
from toplogs.services.report import ReportRenderer, SortOrder


def test_top_n_by_value_drops_the_rest():
    rows = ReportRenderer.render_table({"a": 5, "b": 9, "c": 1}.items(), SortOrder.BY_VALUE, 2)
    assert rows == [("b", "9"), ("a", "5")]


def test_by_value_ties_are_deterministic():
    pairs = [("zeta", 3), ("alpha", 3), ("mid", 3)]
    first = ReportRenderer.render_table(pairs, SortOrder.BY_VALUE, None)
    second = ReportRenderer.render_table(list(reversed(pairs)), SortOrder.BY_VALUE, None)
    assert first == second
    assert [k for k, _ in first] == ["alpha", "mid", "zeta"]


def test_by_key_sorts_display_form_lexically():
    rows = ReportRenderer.render_table([(500, 1), (200, 7), (404, 2)], SortOrder.BY_KEY, None)
    assert rows == [("200", "7"), ("404", "2"), ("500", "1")]

    rows = ReportRenderer.render_table([(9, 1), (10, 1)], SortOrder.BY_KEY, None)
    assert [k for k, _ in rows] == ["10", "9"]


def test_no_limit_keeps_every_row():
    pairs = [(f"/p{i}", i) for i in range(25)]
    assert len(ReportRenderer.render_table(pairs, SortOrder.BY_VALUE, None)) == 25


def test_bucket_labels_are_aligned():
    buckets = [
        Bucket(lo=1, hi=3, count=200),
        Bucket(lo=3, hi=10, count=101),
        Bucket(lo=0, hi=0, count=4, unknown=True),
    ]
    assert ReportRenderer.render_buckets(buckets) == [
        ("1 to  3", "200"),
        ("3 to 10", "101"),
        ("<none>", "4"),
    ]


def test_section_wraps_rows():
    section = ReportRenderer.section("Response Codes", [(200, 2)], SortOrder.BY_KEY)
    assert section.title == "Response Codes"
    assert section.rows == [("200", "2")]


def test_bucket_label_width_follows_largest_second():
    buckets = [Bucket(lo=0, hi=10, count=5), Bucket(lo=10, hi=100, count=5)]
    assert ReportRenderer.render_buckets(buckets) == [(" 0 to 10", "5"), ("10 to 100", "5")]
