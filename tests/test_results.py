import pytest

from posturekit.results import ResourceAssociatedControl, ResourceAssociatedRule, Result
from posturekit.status import (
    SUB_STATUS_CONFIGURATION_INFO,
    SUB_STATUS_MANUAL_REVIEW_INFO,
    Filters,
    ScanningStatus,
    ScanningSubStatus,
    StatusInfo,
)


def _control(control_id, name, rules, status=None):
    return ResourceAssociatedControl(
        control_id=control_id, name=name, rules=rules, status=status or StatusInfo()
    )


def control_passed():
    return _control("C-0001", "passed", [ResourceAssociatedRule(name="r-pass", status="passed")])


def control_failed():
    return _control("C-0002", "failed", [ResourceAssociatedRule(name="r-fail", status="failed")])


def control_exception():
    rule = ResourceAssociatedRule(name="r-exc", status="passed", sub_status="w/exceptions", exception=[{"name": "e"}])
    return _control("C-0003", "exception", [rule])


def control_configuration():
    rule = ResourceAssociatedRule(name="r-conf", status="failed", control_configurations={})
    return _control("C-0004", "configuration", [rule])


def result_failed():
    return Result(
        resource_id="apps/v1/default/Deployment/web",
        associated_controls=[
            _control("C-0087", "first", [ResourceAssociatedRule(name="rule-a", status="failed")]),
            _control("C-0088", "second", [ResourceAssociatedRule(name="rule-b", status="passed")]),
            _control("C-0089", "third", [ResourceAssociatedRule(name="rule-c", status="failed")]),
        ],
    )


def result_passed():
    return Result(
        resource_id="v1/default/Pod/p",
        associated_controls=[
            _control("C-0088", "second", [ResourceAssociatedRule(name="rule-b", status="passed")]),
        ],
    )


def test_set_get_control_id():
    control = ResourceAssociatedControl()
    control.control_id = "C-0078"
    assert control.control_id == "C-0078"


def test_set_get_rule_name():
    rule = ResourceAssociatedRule()
    rule.name = "my-rule"
    assert rule.name == "my-rule"


def test_set_get_resource_id():
    result = Result()
    result.resource_id = "my/id"
    assert result.resource_id == "my/id"


def test_set_status_passed():
    control = control_passed()
    control.set_status("")
    assert control.get_status().status() is ScanningStatus.PASSED
    assert control.get_sub_status() is ScanningSubStatus.UNKNOWN
    assert control.get_status().is_passed()
    assert not control.get_status().is_failed()
    assert not control.get_status().is_skipped()


def test_set_status_failed():
    control = control_failed()
    control.set_status("")
    assert control.get_status().status() is ScanningStatus.FAILED
    assert control.get_sub_status() is ScanningSubStatus.UNKNOWN
    assert control.get_status().is_failed()
    assert not control.get_status().is_passed()


def test_set_status_exception():
    control = control_exception()
    control.set_status("")
    assert control.get_status().status() is ScanningStatus.PASSED
    assert control.get_sub_status() is ScanningSubStatus.EXCEPTION


def test_set_status_configuration():
    control = control_configuration()
    control.set_status("configuration")
    assert control.get_status().status() is ScanningStatus.SKIPPED
    assert control.get_sub_status() is ScanningSubStatus.CONFIGURATION
    assert control.get_status().info() == SUB_STATUS_CONFIGURATION_INFO
    assert control.get_status().is_skipped()


def test_set_status_configuration_with_empty_value():
    rule = ResourceAssociatedRule(name="r", status="passed", control_configurations={"k": []})
    control = _control("C-9", "c", [rule])
    control.set_status(ScanningSubStatus.CONFIGURATION)
    assert control.get_status().status() is ScanningStatus.SKIPPED


def test_set_status_configuration_present_keeps_status():
    rule = ResourceAssociatedRule(name="r", status="failed", control_configurations={"k": ["v"]})
    control = _control("C-9", "c", [rule])
    control.set_status("configuration")
    assert control.get_status().status() is ScanningStatus.FAILED
    assert control.get_sub_status() is ScanningSubStatus.UNKNOWN


def test_set_status_manual_review():
    control = control_failed()
    control.set_status("manual review")
    assert control.get_status().status() is ScanningStatus.SKIPPED
    assert control.get_sub_status() is ScanningSubStatus.MANUAL_REVIEW
    assert control.get_status().info() == SUB_STATUS_MANUAL_REVIEW_INFO


def test_set_status_requires_review():
    control = control_failed()
    control.set_status("requires review")
    assert control.get_status().status() is ScanningStatus.SKIPPED
    assert control.get_sub_status() is ScanningSubStatus.REQUIRES_REVIEW


def test_manual_review_does_not_change_passed():
    control = control_passed()
    control.set_status("manual review")
    assert control.get_status().status() is ScanningStatus.PASSED


def test_old_controls_status_and_sub_status():
    data = [
        {"controlID": "C-0054", "name": "a", "rules": [
            {"name": "r1", "status": "failed", "exception": [{"name": "ex"}]}]},
        {"controlID": "C-0067", "name": "b", "rules": [{"name": "r2", "status": "failed"}]},
        {"controlID": "C-0002", "name": "c", "rules": [{"name": "r3", "status": "passed"}]},
    ]
    expected_status = {"C-0054": "passed", "C-0067": "failed", "C-0002": "passed"}
    expected_sub = {"C-0054": "w/exceptions", "C-0067": "", "C-0002": ""}
    for control in (ResourceAssociatedControl.from_dict(item) for item in data):
        assert control.is_old_control()
        assert control.get_status().status().value == expected_status[control.control_id]
        assert control.get_sub_status().value == expected_sub[control.control_id]


def test_new_controls_status_and_sub_status():
    data = [
        {"controlID": "C-0053", "name": "a", "status": {"status": "passed", "subStatus": "w/exceptions"},
         "rules": [{"name": "r1", "status": "passed", "subStatus": "w/exceptions"}]},
        {"controlID": "C-0014", "name": "b", "status": {"status": "passed"}},
        {"controlID": "C-0212", "name": "c", "status": {"status": "failed"},
         "rules": [{"name": "r3", "status": "failed"}]},
    ]
    expected_status = {"C-0053": "passed", "C-0014": "passed", "C-0212": "failed"}
    expected_sub = {"C-0053": "w/exceptions", "C-0014": "", "C-0212": ""}
    for control in (ResourceAssociatedControl.from_dict(item) for item in data):
        assert not control.is_old_control()
        assert control.get_status().status().value == expected_status[control.control_id]
        assert control.get_sub_status().value == expected_sub[control.control_id]


def test_rule_set_status_passed_keeps_sub_status():
    rule = ResourceAssociatedRule(name="r", status="failed", sub_status="irrelevant")
    rule.set_status("passed", None)
    assert rule.status is ScanningStatus.PASSED
    assert rule.sub_status is ScanningSubStatus.IRRELEVANT


def test_rule_set_status_with_exception():
    rule = ResourceAssociatedRule(name="r", exception=[{"name": "e"}])
    rule.set_status(ScanningStatus.FAILED, None)
    assert rule.get_status(None).status() is ScanningStatus.PASSED
    assert rule.sub_status is ScanningSubStatus.EXCEPTION


def test_rule_set_status_with_filters():
    exception = {"posturePolicies": [{"frameworkName": "NSA"}]}
    rule = ResourceAssociatedRule(name="r", exception=[exception])
    rule.set_status("failed", Filters(framework_names=["MITRE"]))
    assert rule.status is ScanningStatus.FAILED
    rule.set_status("failed", Filters(framework_names=["NSA"]))
    assert rule.status is ScanningStatus.PASSED
    assert rule.sub_status is ScanningSubStatus.EXCEPTION


def test_rule_invalid_status_raises():
    with pytest.raises(ValueError):
        ResourceAssociatedRule(name="r").set_status("bogus", None)


def test_result_status():
    failed = result_failed()
    assert failed.get_status(None).status() is ScanningStatus.FAILED
    assert failed.get_status(None).is_failed()
    assert not failed.get_status(None).is_passed()
    passed = result_passed()
    assert passed.get_status(None).status() is ScanningStatus.PASSED
    assert passed.get_status(None).is_passed()
    assert not passed.get_status(None).is_skipped()


def test_result_status_unknown_without_controls():
    assert Result().get_status(None).status() is ScanningStatus.UNKNOWN


def test_result_list():
    failed = result_failed()
    ids = failed.list_controls_ids(None)
    assert len(ids.all()) == 3
    assert ids.failed() == ["C-0087", "C-0089"]
    assert ids.passed() == ["C-0088"]

    passed = result_passed().list_controls_ids(None)
    assert passed.passed() == ["C-0088"]
    assert passed.failed() == []


def test_list_controls_names():
    names = result_failed().list_controls_names(None)
    assert names.failed() == ["first", "third"]
    assert names.passed() == ["second"]


def test_list_rules_of_control():
    result = result_failed()
    assert len(result.list_rules_of_control("", "")) == 3
    first_name = result.list_controls_names(None).all()[0]
    by_name = result.list_rules_of_control("", first_name)
    assert 0 < len(by_name) < 3
    first_id = result.list_controls_ids(None).all()[0]
    by_id = result.list_rules_of_control(first_id, "")
    assert 0 < len(by_id) < 3


def test_list_rules_unique_by_name():
    result = Result(associated_controls=[
        _control("C-1", "a", [ResourceAssociatedRule(name="shared"), ResourceAssociatedRule(name="x")]),
        _control("C-2", "b", [ResourceAssociatedRule(name="shared")]),
    ])
    assert [rule.name for rule in result.list_rules()] == ["shared", "x"]


def test_result_round_trip():
    original = result_failed()
    original.associated_controls[0].set_status("")
    copy = Result.from_dict(original.to_dict())
    assert copy == original
    assert copy.to_dict()["resourceID"] == "apps/v1/default/Deployment/web"