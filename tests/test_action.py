from __future__ import annotations

import json
from unittest.mock import Mock

import pytest

from tourwatch.action import emit_outputs, run_action
from tourwatch.config import COMMENT_PREFIX, PullRequestContext, TourwatchConfig
from tourwatch.errors import ApiError, DirectoryReadError
from tourwatch.github import GitHubClient, IssueComment

CONTEXT = PullRequestContext(repo="octo/repo", number=7)


@pytest.fixture
def tour_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    tours = tmp_path / ".tours"
    tours.mkdir()
    (tours / "a.tour").write_text(json.dumps({"title": "A", "steps": [{"file": "src/x.js"}]}))
    return tours


def make_client(changed, comments=()):
    client = Mock(spec=GitHubClient)
    client.get_pull_files.return_value = list(changed)
    client.list_issue_comments.return_value = list(comments)
    return client


def read_outputs(path):
    outputs = {}
    for line in path.read_text().splitlines():
        name, value = line.split("=", 1)
        outputs[name] = json.loads(value)
    return outputs


def test_run_action_creates_comment_for_missing_tour(tour_dir, tmp_path):
    client = make_client(["src/x.js", "README.md"])
    output_file = tmp_path / "outputs.txt"

    result = run_action(TourwatchConfig(), CONTEXT, client, output_file=output_file)

    assert result.impacted_files == ["src/x.js"]
    assert result.impacted_tours == [".tours/a.tour"]
    assert result.missing_tour_updates == [".tours/a.tour"]
    client.create_comment.assert_called_once()
    repo, number, body = client.create_comment.call_args.args
    assert (repo, number) == ("octo/repo", 7)
    assert body.startswith(COMMENT_PREFIX)
    client.update_comment.assert_not_called()
    assert read_outputs(output_file) == {
        "impactedFiles": ["src/x.js"],
        "impactedTours": [".tours/a.tour"],
        "missingTourUpdates": [".tours/a.tour"],
    }


def test_run_action_updates_most_recent_comment(tour_dir, tmp_path):
    comments = [
        IssueComment(1, f"{COMMENT_PREFIX}\nold"),
        IssueComment(2, f"{COMMENT_PREFIX}\nnewer"),
    ]
    client = make_client(["src/x.js", ".tours/a.tour"], comments)

    result = run_action(TourwatchConfig(), CONTEXT, client, output_file=tmp_path / "out")

    assert result.missing_tour_updates == []
    client.update_comment.assert_called_once()
    assert client.update_comment.call_args.args[:2] == ("octo/repo", 2)
    client.create_comment.assert_not_called()


def test_run_action_skips_comment_without_impact(tour_dir, tmp_path):
    client = make_client(["README.md"])
    output_file = tmp_path / "outputs.txt"

    result = run_action(TourwatchConfig(), CONTEXT, client, output_file=output_file)

    assert not result.has_impact
    client.create_comment.assert_not_called()
    client.update_comment.assert_not_called()
    assert read_outputs(output_file) == {
        "impactedFiles": [],
        "impactedTours": [],
        "missingTourUpdates": [],
    }


def test_run_action_silent_mode_does_not_comment(tour_dir, tmp_path):
    client = make_client(["src/x.js"])
    output_file = tmp_path / "outputs.txt"

    result = run_action(TourwatchConfig(silent=True), CONTEXT, client, output_file=output_file)

    assert result.impacted_tours == [".tours/a.tour"]
    client.create_comment.assert_not_called()
    client.update_comment.assert_not_called()
    assert read_outputs(output_file)["impactedTours"] == [".tours/a.tour"]


def test_run_action_failure_emits_no_outputs(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    client = make_client(["src/x.js"])
    output_file = tmp_path / "outputs.txt"

    with pytest.raises(DirectoryReadError):
        run_action(TourwatchConfig(tour_path="missing"), CONTEXT, client, output_file=output_file)

    assert not output_file.exists()
    client.create_comment.assert_not_called()


def test_run_action_propagates_api_errors(tour_dir, tmp_path):
    client = make_client(["src/x.js"])
    client.get_pull_files.side_effect = ApiError("GitHub API error: 500 - boom", 500)

    with pytest.raises(ApiError, match="boom"):
        run_action(TourwatchConfig(), CONTEXT, client, output_file=tmp_path / "out")


def test_emit_outputs_prints_without_output_file(capsys):
    emit_outputs({"impactedFiles": ["a.py"], "impactedTours": []})

    assert capsys.readouterr().out.splitlines() == [
        'impactedFiles=["a.py"]',
        "impactedTours=[]",
    ]


def test_emit_outputs_appends_to_file(tmp_path):
    output_file = tmp_path / "github_output"
    output_file.write_text("existing=1\n")

    emit_outputs({"missingTourUpdates": ["t.tour"]}, output_file)

    assert output_file.read_text() == 'existing=1\nmissingTourUpdates=["t.tour"]\n'
