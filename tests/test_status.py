import pytest

from posturekit.status import (
    SEVERITY_CRITICAL,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    SEVERITY_UNKNOWN,
    AllLists,
    Filters,
    ScanningStatus,
    ScanningSubStatus,
    StatusInfo,
    compare,
    compare_status_and_sub_status,
    control_severity_to_string,
)


def test_failed_dominates_every_status():
    for status in ScanningStatus:
        assert compare(status, ScanningStatus.FAILED) is ScanningStatus.FAILED
        assert compare(ScanningStatus.FAILED, status) is ScanningStatus.FAILED


def test_compare_is_symmetric_and_idempotent():
    for a in ScanningStatus:
        assert compare(a, a) is a
        for b in ScanningStatus:
            assert compare(a, b) is compare(b, a)


def test_unknown_is_identity():
    for status in ScanningStatus:
        assert compare(ScanningStatus.UNKNOWN, status) is status


def test_skipped_over_passed():
    assert compare(ScanningStatus.PASSED, ScanningStatus.SKIPPED) is ScanningStatus.SKIPPED


def test_compare_accepts_strings():
    assert compare("passed", "failed") is ScanningStatus.FAILED


def test_compare_rejects_unknown_value():
    with pytest.raises(ValueError):
        compare("bogus", "passed")


def test_passed_keeps_exception_sub_status():
    result = compare_status_and_sub_status(
        ScanningStatus.PASSED, ScanningStatus.PASSED,
        ScanningSubStatus.UNKNOWN, ScanningSubStatus.EXCEPTION,
    )
    assert result == (ScanningStatus.PASSED, ScanningSubStatus.EXCEPTION)


def test_failed_clears_sub_status():
    result = compare_status_and_sub_status(
        ScanningStatus.PASSED, ScanningStatus.FAILED,
        ScanningSubStatus.EXCEPTION, ScanningSubStatus.UNKNOWN,
    )
    assert result == (ScanningStatus.FAILED, ScanningSubStatus.UNKNOWN)


def test_exception_sub_status_value():
    assert ScanningSubStatus("w/exceptions") is ScanningSubStatus.EXCEPTION


def test_status_info_predicates():
    info = StatusInfo(inner_status="failed")
    assert info.status() is ScanningStatus.FAILED
    assert info.is_failed() and not info.is_passed() and not info.is_skipped()
    assert StatusInfo(inner_status=ScanningStatus.SKIPPED).is_skipped()


def test_status_info_info_text():
    info = StatusInfo(ScanningStatus.SKIPPED, inner_info="no host sensor flag")
    assert info.info() == "no host sensor flag"


def test_status_info_round_trip():
    info = StatusInfo(ScanningStatus.PASSED, ScanningSubStatus.EXCEPTION, "why")
    assert StatusInfo.from_dict(info.to_dict()) == info


def test_empty_status_info_serialises_to_nothing():
    assert StatusInfo().to_dict() == {}


def test_all_lists_append_routes_by_status():
    lists = AllLists()
    lists.append(ScanningStatus.FAILED, "a", "b")
    lists.append("passed", "c")
    lists.append(ScanningStatus.SKIPPED, "d")
    lists.append(ScanningStatus.UNKNOWN, "e")
    assert lists.failed() == ["a", "b"]
    assert lists.passed() == ["c"]
    assert lists.skipped() == ["d"]
    assert lists.other() == ["e"]
    assert sorted(lists.all()) == ["a", "b", "c", "d", "e"]
    assert len(lists) == 5


def test_to_unique_resources_failed_wins():
    lists = AllLists(passed=["x", "y", "y"], failed=["x"], skipped=["y", "z"], other=["z"])
    lists.to_unique_resources()
    assert lists.failed() == ["x"]
    assert lists.passed() == ["y"]
    assert lists.skipped() == ["z"]
    assert lists.other() == []


def test_to_unique_controls_dedupes_each_list_only():
    lists = AllLists(passed=["x", "x"], failed=["x", "y", "y"])
    lists.to_unique_controls()
    assert lists.passed() == ["x"]
    assert lists.failed() == ["x", "y"]


def test_all_lists_round_trip():
    lists = AllLists(passed=["a"], failed=["b"], skipped=["c"], other=["d"])
    assert AllLists.from_dict(lists.to_dict()) == lists


def test_filters_without_frameworks_keep_everything():
    exceptions = [{"posturePolicies": [{"frameworkName": "NSA"}]}, {}]
    assert Filters().filter_exceptions(exceptions) == exceptions


def test_filters_select_framework():
    nsa = {"posturePolicies": [{"frameworkName": "NSA"}]}
    mitre = {"posturePolicies": [{"frameworkName": "MITRE"}]}
    generic = {"posturePolicies": [{"controlID": "C-0087"}]}
    kept = Filters(framework_names=["NSA"]).filter_exceptions([nsa, mitre, generic])
    assert kept == [nsa, generic]


@pytest.mark.parametrize(
    "score,expected",
    [
        (0, SEVERITY_UNKNOWN),
        (1, SEVERITY_LOW),
        (3.9, SEVERITY_LOW),
        (4, SEVERITY_MEDIUM),
        (7, SEVERITY_HIGH),
        (9, SEVERITY_CRITICAL),
        (10, SEVERITY_CRITICAL),
    ],
)
def test_control_severity_to_string(score, expected):
    assert control_severity_to_string(score) == expected