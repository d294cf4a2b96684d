# posturekit

Data structures and summarisation logic for security posture scan reports.

A posture scan tests resources against controls, and each control is made up
of rules. `posturekit` holds the per-resource results. It folds those results
into control, framework and whole-scan summaries and counts resources by
status and by severity. It also builds prioritisation vectors from
attack-track paths.

## Installation

```
pip install posturekit
```

The package has no runtime dependencies.

## Modules

### `posturekit.status`

- `ScanningStatus` holds the statuses `passed`, `failed`, `skipped` and unknown (`""`).
- `ScanningSubStatus` holds the sub-statuses `w/exceptions`, `irrelevant`,
  `configuration`, `manual review`, `requires review` and `integration`.
- `StatusInfo` is a status together with its sub-status and an info message.
- `compare(a, b)` returns the more significant of two statuses. The order is
  failed, then skipped, then passed, then unknown.
- `compare_status_and_sub_status` combines two status and sub-status pairs.
- `AllLists` groups IDs by status. It has `append`, `passed`, `failed`,
  `skipped`, `other` and `all`.
  - `to_unique_resources()` deduplicates across the lists, so each ID ends up
    in one list only. Failed takes precedence, then passed, skipped and other.
  - `to_unique_controls()` deduplicates each list on its own.
- `Filters(framework_names=[...])` has `filter_exceptions`. It keeps the
  exceptions whose posture policies name no framework or one of the selected
  frameworks. The exceptions can be mappings or objects.
- `control_severity_to_string(score)` maps a score factor to `Low`, `Medium`,
  `High`, `Critical` or `Unknown`.

### `posturekit.slices`

These helpers work on lists of strings. All of them return new lists and
leave their arguments untouched.

- `unique_strings` keeps the first occurrence of each value.
- `trim` swaps in the last element when it removes one, so the order may change.
- `trim_stable` keeps the original order.
- `trim_unique` and `trim_stable_unique` deduplicate and trim together.
- `string_in_slice` tells whether a string is in a list.
- `unique_resources_ids` and `trim_unique_ids` apply the same helpers to
  resource IDs.

### `posturekit.counters`

- `PostureCounters` counts posture objects by status.
- `StatusCounters` counts resources by status. `set` takes the counts from the
  lengths of the lists in an `AllLists`.
- `SubStatusCounters` counts resources that passed because of an exception.
- `SeverityCounters` counts by severity. `increase(severity, amount)` ignores
  unknown severities.
- `calculate_status(counters)` gives failed if anything failed, else skipped if
  anything was skipped, else passed.

### `posturekit.results`

- `Result` holds the controls tested against one resource.
- `ResourceAssociatedControl` is one of those controls.
- `ResourceAssociatedRule` is one rule of a control.

These classes work out statuses and sub-statuses:

- Controls from older reports carry no status of their own, so it is worked
  out from their rules.
- A rule that has exceptions becomes a pass with the `w/exceptions` sub-status.
- `ResourceAssociatedControl.set_status(action_required)` turns a failure into
  a skip for controls that require review or manual review. It also skips
  configuration controls whose rules lack configuration values.

`Result` lists control IDs and names by status, and lists rules overall or per
control. Every class has `to_dict` and `from_dict`.

### `posturekit.summary`

- `ControlSummary` summarises a scan for a single control.
- `ControlSummaries` is a dict keyed by control ID. It has `get_control`,
  which looks a control up by `ControlCriteria.ID` or by a part of its name.
  It also has `list_controls_ids`, `number_of_controls` and
  `list_resources_ids`.
- `FrameworkSummary` summarises a scan for a single framework.
- `update_controls_summary_counters(result, controls, filters)` adds a resource
  result to the matching control summaries.

### `posturekit.summarydetails`

`SummaryDetails` is the summary of a whole scan.

- `append_resource_result` folds in one resource result. It updates the
  control counters, the resource severity counters and each framework.
- `init_resources_summary` settles the control and framework statuses and
  counts failed controls by severity.
- It also lists frameworks and controls by status.

### `posturekit.prioritization`

- `ControlsVector` is a chain of controls along an attack-track path. It has
  `calculate_score`, `calculate_severity`, `add` and `is_valid`.
- `PrioritizedResource` is a resource scored through its priority vectors.
- `controls_vectors_from_attack_track_paths(attack_track, paths)` builds one
  vector for every combination of one control per step of each path. It leaves
  out vectors that hold only security-impact controls.

Attack tracks, steps and controls are passed in as any objects with the
attributes described by the `AttackTrack`, `AttackTrackStep` and
`AttackTrackControl` protocols.

### `posturekit.report`

- `PostureReport` is a scan report.
- The metadata classes are `Metadata`, `ScanMetadata`, `ClusterMetadata`,
  `ContextMetadata` and the context classes for a repository, a file, a
  directory and a Helm chart.
- `ScanningTarget` says what a scan was run against.
- `CloudMetadata.from_parser` builds cloud metadata from any object that
  follows the `CloudParser` protocol.

`PostureReport` methods:

- `to_dict` and `to_json` serialise the whole report.
- `from_json` decodes only the identifiers, the generation time (converted to
  local time) and the scan and cluster metadata. It raises `ValueError` on
  malformed input.
- `initialize_summary` folds `results` into `summary_details`.
- `resource_status` and `resource_result` look up a single resource.

## Example

```python
from posturekit.report import PostureReport
from posturekit.results import ResourceAssociatedControl, ResourceAssociatedRule, Result
from posturekit.summary import ControlSummary

report = PostureReport(cluster_name="minikube")
report.summary_details.controls["C-0045"] = ControlSummary(control_id="C-0045", name="Writable hostPath")
report.results.append(
    Result(
        resource_id="apps/v1/default/Deployment/nginx",
        associated_controls=[
            ResourceAssociatedControl(
                control_id="C-0045",
                rules=[ResourceAssociatedRule(name="alert-rw-hostpath", status="failed")],
            )
        ],
    )
)
report.initialize_summary()

print(report.get_status().status())  # ScanningStatus.FAILED
print(report.resource_status("apps/v1/default/Deployment/nginx").status())
print(report.to_json())
```

## What the package does not do

`posturekit` is a data model only:

- It does not scan anything.
- It does not evaluate policies.
- It does not match exception policies against resources.
- It does not compute attack-track paths. Those are given to it ready-made.
- It has no command-line tool and no storage.

## Running the tests

```
pip install -e ".[test]"
pytest
```