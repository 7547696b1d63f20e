from __future__ import annotations

from tourwatch.impact import ImpactResult, analyze_impact
from tourwatch.tours import TourDefinition, TourStep, covered_files


def tour(filename, *files):
    return TourDefinition(filename, tuple(TourStep(f) for f in files))


def analyze(changed, tours):
    return analyze_impact(changed, covered_files(tours), tours)


def test_tour_not_updated_is_missing():
    tours = [tour("a.tour", "src/x.js")]

    result = analyze(["src/x.js", "README.md"], tours)

    assert result.impacted_files == ["src/x.js"]
    assert result.impacted_tours == ["a.tour"]
    assert result.missing_tour_updates == ["a.tour"]


def test_tour_updated_in_same_pr_is_not_missing():
    tours = [tour("a.tour", "src/x.js")]

    result = analyze(["src/x.js", "a.tour"], tours)

    assert result.impacted_tours == ["a.tour"]
    assert result.missing_tour_updates == []


def test_unrelated_changes_have_no_impact():
    tours = [tour("a.tour", "src/x.js")]

    result = analyze(["README.md"], tours)

    assert result == ImpactResult()
    assert not result.has_impact


def test_impacted_files_are_sorted_intersection():
    tours = [tour("a.tour", "src/z.py", "src/a.py"), tour("b.tour", "lib/m.py")]
    changed = ["src/z.py", "docs/index.md", "lib/m.py", "src/a.py", "src/z.py"]

    result = analyze(changed, tours)

    assert result.impacted_files == sorted(set(changed) & {"src/z.py", "src/a.py", "lib/m.py"})
    assert result.impacted_files == ["lib/m.py", "src/a.py", "src/z.py"]


def test_impacted_tours_keep_discovery_order_without_duplicates():
    tours = [
        tour("z.tour", "shared.py", "shared.py"),
        tour("a.tour", "other.py", "shared.py"),
        tour("m.tour", "untouched.py"),
    ]

    result = analyze(["shared.py", "other.py"], tours)

    assert result.impacted_tours == ["z.tour", "a.tour"]


def test_missing_updates_are_subset_of_impacted_tours():
    tours = [tour("t1.tour", "a.py"), tour("t2.tour", "b.py"), tour("t3.tour", "c.py")]
    changed = ["a.py", "b.py", "t2.tour", "t3.tour"]

    result = analyze(changed, tours)

    assert result.impacted_tours == ["t1.tour", "t2.tour"]
    assert set(result.missing_tour_updates) <= set(result.impacted_tours)
    assert result.missing_tour_updates == ["t1.tour"]


def test_analysis_is_idempotent():
    tours = [tour("a.tour", "x.py"), tour("b.tour", "y.py")]
    changed = ["y.py", "x.py"]

    assert analyze(changed, tours) == analyze(changed, tours)


def test_as_outputs_uses_action_output_names():
    result = ImpactResult(["x.py"], ["a.tour"], ["a.tour"])

    assert result.as_outputs() == {
        "impactedFiles": ["x.py"],
        "impactedTours": ["a.tour"],
        "missingTourUpdates": ["a.tour"],
    }
